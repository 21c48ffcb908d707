"""
Region Directory: spreadsheet rows -> per-region directory pages.

Build side (sources -> ingest -> synthesize -> artifact -> pages) is Prefect-free;
the Prefect wrapper lives in flows/build_directory_flow.py.
Request side lives in regiondir.edge.
"""

__version__ = "0.3.0"
