# app/utils/formatting.py


def format_bytes(bytes_num):
    if not bytes_num:
        return "0 Bytes"
    value = float(bytes_num)
    units = ['Bytes', 'KB', 'MB', 'GB', 'TB']
    for unit in units:
        if value < 1024 or unit == units[-1]:
            break
        value /= 1024
    value = round(value, 2)
    if value == int(value):
        value = int(value)
    return f"{value} {unit}"


def format_date(value):
    if not value:
        return "No expiry"
    return value.strftime('%B %d, %Y').replace(' 0', ' ')


def format_datetime(value):
    if not value:
        return ""
    return value.strftime('%b %d, %Y at %I:%M %p')
