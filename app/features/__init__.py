"""
Features Module - Self-contained feature units.

- journaling: entries, reflections, local storage and views
"""
