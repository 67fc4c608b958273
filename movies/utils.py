import json
from datetime import datetime, date, timezone as dt_timezone
from decimal import Decimal, InvalidOperation as DecimalException

from django.conf import settings
from django.core.paginator import Paginator, EmptyPage
from django.utils import timezone
from django.utils.dateparse import parse_datetime as django_parse_datetime, parse_date as django_parse_date

from .exceptions import InvalidRequest

def read_json(request):

    if not request.body:
        return {}
    data = json.loads(request.body)
    if not isinstance(data, dict):
        raise InvalidRequest('Request body must be a JSON object.')
    return data

def parse_int(value, field, required=False, minimum=None):
    if value in (None, ''):
        if required:
            raise InvalidRequest(f'{field} is required.')
        return None
    if isinstance(value, float) and not value.is_integer():
        raise InvalidRequest(f'{field} must be an integer.')
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        raise InvalidRequest(f'{field} must be an integer.')
    if minimum is not None and number < minimum:
        raise InvalidRequest(f'{field} must be at least {minimum}.')
    return number

def parse_decimal(value, field, required=False):
    if value in (None, ''):
        if required:
            raise InvalidRequest(f'{field} is required.')
        return None
    try:
        number = Decimal(str(value))
    except (DecimalException, ValueError):
        raise InvalidRequest(f'{field} must be a number.')
    # NaN and Infinity parse but cannot be compared or stored
    if not number.is_finite():
        raise InvalidRequest(f'{field} must be a finite number.')
    return number

def parse_bool(value, field):
    if value in (None, ''):
        return None
    if isinstance(value, bool):
        return value
    lowered = str(value).lower()
    if lowered in ('true', '1', 'yes'):
        return True
    if lowered in ('false', '0', 'no'):
        return False
    raise InvalidRequest(f'{field} must be true or false.')

def parse_datetime(value, field, required=False):
    """Parses an ISO-8601 timestamp, treating naive values as UTC."""
    if value in (None, ''):
        if required:
            raise InvalidRequest(f'{field} is required.')
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = django_parse_datetime(str(value))
        except ValueError:
            parsed = None
        if parsed is None:
            day = _parse_date_or_none(value)
            if day is None:
                raise InvalidRequest(f'{field} must be an ISO-8601 date or datetime.')
            parsed = datetime.combine(day, datetime.min.time())
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed, dt_timezone.utc)
    return parsed

def parse_date(value, field, required=False):
    if value in (None, ''):
        if required:
            raise InvalidRequest(f'{field} is required.')
        return None
    if isinstance(value, date):
        return value
    parsed = _parse_date_or_none(value)
    if parsed is None:
        raise InvalidRequest(f'{field} must be a date (YYYY-MM-DD).')
    return parsed

def _parse_date_or_none(value):
    try:
        return django_parse_date(str(value))
    except ValueError:
        return None

def parse_choice(value, field, choices):
    if value in (None, ''):
        return None
    normalized = str(value).strip().upper()
    valid = [choice for choice, _ in choices]
    if normalized not in valid:
        raise InvalidRequest(f'{field} must be one of: {", ".join(valid)}.')
    return normalized

def parse_sort(sort_by, sort_order, fields, default, default_desc=True):
    """Maps a client sort key onto an ORM ordering expression.

    ``fields`` maps lower-cased client keys (``createdat``) to model fields.
    Unknown keys fall back to ``default``.
    """
    key = (sort_by or '').replace('_', '').lower()
    field = fields.get(key, fields[default])
    if sort_order:
        descending = str(sort_order).lower() == 'desc'
    else:
        descending = default_desc
    return f'-{field}' if descending else field

def page_params(params):
    """Reads ``page``/``page_size``. Invalid or oversized page sizes fall back to the default."""
    default_size = settings.DEFAULT_PAGE_SIZE
    try:
        page = int(params.get('page') or 1)
    except (TypeError, ValueError):
        page = 1
    if page < 1:
        page = 1

    try:
        page_size = int(params.get('page_size') or default_size)
    except (TypeError, ValueError):
        page_size = default_size
    if page_size < 1 or page_size > settings.MAX_PAGE_SIZE:
        page_size = default_size

    return page, page_size

def paginate(queryset, page, page_size, mapper):

    paginator = Paginator(queryset, page_size)
    try:
        items = list(paginator.page(page).object_list)
    except EmptyPage:
        items = []

    return {
        'items': [mapper(item) for item in items],
        'page': page,
        'page_size': page_size,
        'total_count': paginator.count,
        'total_pages': paginator.num_pages if paginator.count else 0,
    }
