"""
Utility functions shared across views.
"""

import datetime
import json


def superuser_required(user):
    """Check if user is a superuser."""
    return user.is_superuser


def parse_iso_date(value):
    """Parse 'YYYY-MM-DD' into a date. Raises ValueError on bad input."""
    if not value:
        raise ValueError('Missing date')
    return datetime.datetime.strptime(str(value), '%Y-%m-%d').date()


def read_json_body(request):
    """Return the decoded JSON body, or POST data for form submissions."""
    if request.content_type == 'application/json':
        return json.loads(request.body or b'{}')
    return request.POST.dict()
