"""Flask route handlers for the JSON API."""

import asyncio
import logging

from flask import Blueprint, current_app, jsonify, request

from ..catalog.query import SiteQuery
from ..catalog.service import SiteCatalog
from ..catalog.validation import validate_create_site, validate_label_payload, validate_url
from ..errors import FieldIssue, LabelAlreadyExistsError, SiteAlreadyExistsError, ValidationError
from ..storage.models import LabelKind

logger = logging.getLogger(__name__)

bp = Blueprint("api", __name__)


def get_catalog() -> SiteCatalog:
    """Get the catalog instance from app config."""
    return current_app.config["CATALOG"]


@bp.errorhandler(ValidationError)
def validation_failed(error: ValidationError):
    return (
        jsonify({"error": "Validation failed", "issues": [i.to_dict() for i in error.issues]}),
        400,
    )


def read_json():
    payload = request.get_json(silent=True)
    if payload is None:
        raise ValidationError([FieldIssue("body", "invalid_json", "Invalid JSON payload")])
    return payload


@bp.get("/sites")
def list_sites():
    """Filtered, paginated site listing."""
    args = request.args
    query = SiteQuery(
        q=args.get("q"),
        category=args.get("category"),
        tag=args.get("tag"),
        page=args.get("page"),
        page_size=args.get("pageSize"),
    )
    result = get_catalog().search_sites(query)
    return jsonify(result.to_dict())


@bp.post("/sites")
def create_site():
    data = validate_create_site(read_json())
    try:
        site = asyncio.run(get_catalog().create_site(data))
    except SiteAlreadyExistsError as e:
        return jsonify({"error": str(e), "site": e.site.to_dict() if e.site else None}), 409
    return jsonify(site.to_dict()), 201


@bp.get("/categories")
def list_categories():
    return _list_labels(LabelKind.CATEGORY)


@bp.post("/categories")
def create_category():
    return _create_label(LabelKind.CATEGORY)


@bp.get("/tags")
def list_tags():
    return _list_labels(LabelKind.TAG)


@bp.post("/tags")
def create_tag():
    return _create_label(LabelKind.TAG)


@bp.get("/metadata")
def metadata():
    """Fetch metadata for ?url= without storing anything."""
    url = validate_url(request.args.get("url"))
    if isinstance(url, FieldIssue):
        raise ValidationError([url])
    result = asyncio.run(get_catalog().fetch_metadata(url))
    return jsonify(result.to_dict())


def _list_labels(kind: LabelKind):
    items = [label.to_dict() for label in get_catalog().list_labels(kind)]
    return jsonify({"items": items, "total": len(items)})


def _create_label(kind: LabelKind):
    name = validate_label_payload(read_json())
    try:
        label = get_catalog().create_label(kind, name)
    except LabelAlreadyExistsError as e:
        return (
            jsonify({"error": f"{kind.value.capitalize()} already exists", kind.value: e.label.to_dict()}),
            409,
        )
    logger.info(f"Created {kind.value} {label.name}")
    return jsonify(label.to_dict()), 201
