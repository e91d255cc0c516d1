"""
Shift Calendar for Staff Scheduling

A desktop application for planning staff shifts on a weekly time grid with
drag-to-create, move and resize, conflict checking, and shift/week
copy-paste.
"""

__version__ = "1.0.0"
__author__ = "Shift Calendar Team"
