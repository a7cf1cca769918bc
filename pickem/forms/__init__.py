from flask import request
from werkzeug.datastructures import ImmutableMultiDict

from pickem.errors import APIError


def json_formdata():
    """
    Flatten a JSON object body into form data WTForms can process.

    Scalars become strings (booleans as "true"/"false") and nulls are
    dropped so optional fields read as missing.
    """
    payload = request.get_json(silent=True)
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise APIError("Request body must be a JSON object", 400)

    items = []
    for key, value in payload.items():
        if value is None or isinstance(value, (dict, list)):
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        items.append((key, str(value)))
    return ImmutableMultiDict(items)


def validate_json_form(form_class, **kwargs):
    """Build form_class from the JSON body or raise a 400 with field errors"""
    form = form_class(formdata=json_formdata(), **kwargs)
    if not form.validate():
        raise APIError("Validation failed", 400, details=form.errors)
    return form
