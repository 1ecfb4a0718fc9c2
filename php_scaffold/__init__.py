"""
php-scaffold: generate PHP framework boilerplate from OpenAPI documents.

Supported frameworks: Laravel, Lumen, Symfony and Slim.
"""

__version__ = "0.4.0"
