# academy/csv_utils.py - CSV parsing for bulk uploads and Excel friendly exports

import csv
import io
import re
import datetime

from django.conf import settings
from django.http import HttpResponse
from django.utils.http import content_disposition_header
from rest_framework.exceptions import ValidationError

BOM = '\ufeff'
PHONE_PATTERN = re.compile(r'^[\d\-+\s]+$')


# ==================== PARSING ====================

def detect_delimiter(first_line):
    """Tab separated when the first line has tabs but no commas (Excel copy/paste)"""
    if '\t' in first_line and ',' not in first_line:
        return '\t'
    return ','


def parse_numbered_csv(text):
    """
    Parse comma or tab separated text into (line_number, trimmed cells) pairs.
    Handles a leading BOM, quoted cells with embedded delimiters and
    blank lines. line_number is the 1-based source line the row starts on.
    """
    if text.startswith(BOM):
        text = text[len(BOM):]
    numbered = [(number, line) for number, line in enumerate(text.splitlines(), start=1) if line.strip()]
    if not numbered:
        return []
    reader = csv.reader(
        (line for _, line in numbered), delimiter=detect_delimiter(numbered[0][1]), skipinitialspace=True
    )
    result = []
    consumed = 0
    for row in reader:
        result.append((numbered[consumed][0], [cell.strip() for cell in row]))
        # line_num counts the non-blank lines read so far
        consumed = reader.line_num
    return result


def parse_csv(text):
    """Parse comma or tab separated text into a list of trimmed rows"""
    return [row for _, row in parse_numbered_csv(text)]


def detect_header(first_row, keywords):
    """True when any cell of the first row contains one of the header keywords"""
    joined = ' '.join(first_row).lower()
    return any(keyword.lower() in joined for keyword in keywords)


def read_rows(text, columns, keywords):
    """
    Map CSV cells onto named fields by position.
    Returns (row_number, values) pairs where row_number is the 1-based line
    in the source file, so errors can point back at the spreadsheet.
    """
    rows = parse_numbered_csv(text)
    start = 1 if rows and detect_header(rows[0][1], keywords) else 0
    result = []
    for line_number, row in rows[start:]:
        values = {
            column: row[position] if position < len(row) else ''
            for position, column in enumerate(columns)
        }
        result.append((line_number, values))
    return result


def read_upload(request):
    """Decode the uploaded `file` (or a raw `csv` text field) as UTF-8 text"""
    upload = request.FILES.get('file')
    if upload is None:
        text = request.data.get('csv')
        if not text:
            raise ValidationError('file: upload a CSV file')
        return str(text)
    if upload.size > settings.BULK_UPLOAD_MAX_BYTES:
        raise ValidationError('file: the CSV file is too large')
    raw = upload.read()
    try:
        return raw.decode('utf-8-sig')
    except UnicodeDecodeError:
        # Korean Excel saves CSV as CP949 by default
        try:
            return raw.decode('cp949')
        except UnicodeDecodeError:
            raise ValidationError('file: the CSV file must be UTF-8 encoded')


def is_dry_run(request):
    value = request.query_params.get('dryRun') or request.data.get('dryRun')
    return str(value).lower() in ('1', 'true', 'yes')


# ==================== VALIDATION ====================

def require_fields(values, labels):
    """Return an error message per empty required field"""
    return [f'{label} is required' for field, label in labels.items() if not values.get(field, '').strip()]


def validate_phone(value, label):
    if value.strip() and not PHONE_PATTERN.match(value.strip()):
        return [f'{label} may only contain digits, -, + and spaces']
    return []


def preview_rows(rows, validator):
    """Dry run result: every row with its validation errors"""
    preview = []
    for row_number, values in rows:
        preview.append({'row': row_number, 'values': values, 'errors': validator(values)})
    invalid = sum(1 for item in preview if item['errors'])
    return {'rows': preview, 'valid': len(preview) - invalid, 'invalid': invalid}


def run_bulk(rows, validator, create, logger, label):
    """
    Create rows one at a time. A failing row is counted and reported, the
    rest of the file is still processed.
    """
    success, errors = 0, []
    for row_number, values in rows:
        row_errors = validator(values)
        if row_errors:
            errors.append({'row': row_number, 'message': '; '.join(row_errors)})
            continue
        try:
            create(values)
            success += 1
        except ValidationError as e:
            errors.append({'row': row_number, 'message': _detail_text(e.detail)})
    logger.info('Bulk %s upload finished: %s created, %s failed', label, success, len(errors))
    return {'success': success, 'fail': len(errors), 'errors': errors}


def _detail_text(detail):
    if isinstance(detail, (list, tuple)):
        return '; '.join(_detail_text(item) for item in detail)
    if isinstance(detail, dict):
        return '; '.join(f'{key}: {_detail_text(value)}' for key, value in detail.items())
    return str(detail)


# ==================== EXPORT ====================

def build_csv(header, rows):
    """UTF-8 with BOM, CRLF line endings, text cells quoted and numbers bare"""
    buffer = io.StringIO()
    buffer.write(BOM)
    writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator='\r\n')
    writer.writerow(header)
    for row in rows:
        writer.writerow(['' if cell is None else cell for cell in row])
    return buffer.getvalue()


def dated_filename(prefix, today=None):
    today = today or datetime.date.today()
    return f'{prefix}_{today.isoformat()}.csv'


def csv_response(filename, header, rows=()):
    """Download response; the header row alone doubles as a bulk upload template"""
    content = build_csv(header, rows) if rows else BOM + ','.join(header)
    response = HttpResponse(content.encode('utf-8'), content_type='text/csv; charset=utf-8')
    response['Content-Disposition'] = content_disposition_header(True, filename)
    return response
