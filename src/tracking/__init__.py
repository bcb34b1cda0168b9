"""Spans, stage metrics and reports."""
