"""
Custom middleware for response security headers and media embedding
"""
from django.conf import settings

SECURITY_HEADERS = {
    'X-Content-Type-Options': 'nosniff',
    'X-XSS-Protection': '1; mode=block',
    'Referrer-Policy': 'strict-origin-when-cross-origin',
    'Permissions-Policy': 'camera=(), microphone=(), geolocation=()',
}


class SecurityHeadersMiddleware:
    """
    Adds the platform security headers to every response
    Headers already set by a view are left untouched
    """
    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        response = self.get_response(request)

        for header, value in SECURITY_HEADERS.items():
            if header not in response:
                response[header] = value

        return response


class MediaFrameOptionsMiddleware:
    """
    Removes the X-Frame-Options header from media responses
    This allows lesson videos and thumbnails to be displayed in iframes
    """
    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        response = self.get_response(request)

        if request.path.startswith(settings.MEDIA_URL) and 'X-Frame-Options' in response:
            del response['X-Frame-Options']

        return response
