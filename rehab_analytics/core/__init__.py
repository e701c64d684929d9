"""
Assessment comparison and progress-analytics engine.

Pure, synchronous computation over in-memory assessment records:
scoring → periods / grouping → comparison / progress → reports.
"""
