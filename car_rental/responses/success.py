from .base import build_response


def success_response(message: str = None, data=None):
    return build_response(200, "success", message=message, data=data)


def data_response(data=None):
    return build_response(200, status='success', data=data)


def created_response(data=None, message: str = None):
    return build_response(201, status='success', message=message, data=data)
