"""
HTTP security headers for the tutorial servers.
"""

from typing import Dict


class SecurityHeaders:
    """
    Standard security headers for HTTP responses.

    Pages get the browser protection headers; JSON relay responses are also
    marked non-cacheable since they carry tickets, codes and tokens.
    """

    @staticmethod
    def get_page_security_headers() -> Dict[str, str]:
        """
        Headers applied to every response.

        Returns:
            dict: Dictionary of security headers
        """
        return {
            'X-Content-Type-Options': 'nosniff',
            'X-Frame-Options': 'DENY',
            'X-XSS-Protection': '1; mode=block',
            'Referrer-Policy': 'no-referrer'
        }

    @staticmethod
    def get_api_security_headers() -> Dict[str, str]:
        """
        Headers added to JSON API responses on top of the page headers.

        Returns:
            dict: Dictionary of cache-control headers
        """
        return {
            'Cache-Control': 'no-cache, no-store, must-revalidate',
            'Pragma': 'no-cache',
            'Expires': '0'
        }

    @classmethod
    def for_path(cls, path: str) -> Dict[str, str]:
        """Headers for a request path: API paths get the no-cache set as well."""
        headers = cls.get_page_security_headers()
        if path.startswith(("/oauth/", "/par/", "/api/", "/demo/", "/debug/")):
            headers.update(cls.get_api_security_headers())
        return headers
