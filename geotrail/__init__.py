"""geotrail - geo-tag web server access logs and render them as listings, KML or charts."""

__version__ = "0.1.0"
