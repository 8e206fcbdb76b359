"""Renderers turn the `(data, code, headers)` produced by views into responses"""

from flask import jsonify, make_response


def render_json(data, code, headers):
    """JSON body, or an empty one when there is no data (as with 204 responses)"""
    body = "" if data is None else jsonify(data)
    response = make_response(body, code)
    response.headers.extend(headers or {})
    return response
