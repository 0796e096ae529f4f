"""Record domain services.

This package holds the record lifecycle logic imported by HTTP routes,
keeping transport concerns separated from the store interaction.
"""

from .records import CreateResult, ListResult, RecordService

__all__ = ['CreateResult', 'ListResult', 'RecordService']
