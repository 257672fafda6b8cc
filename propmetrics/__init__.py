"""
Property Metrics Engine

Derives one consistent set of financial metrics per property, writes it back
to the property record, keeps a snapshot history and rolls properties up by
ownership entity.
"""

__version__ = "0.1.0"
