from drive_backend.exceptions import ValidationError


def int_param(request, name, default):
    value = request.query_params.get(name)
    if value in (None, ""):
        return default
    try:
        return int(value)
    except ValueError:
        raise ValidationError(f"{name} must be an integer.")
