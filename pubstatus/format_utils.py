"""
Output format utilities for pubstatus CLI commands.

Formats ProjectRecord dictionaries as JSONL, JSON, YAML, CSV or TSV.
Tabular formats get one summary row per project.
"""

import csv
import io
import json
import os
from typing import Dict, List, Any, Iterable, Iterator, Optional

import yaml

FORMATS = ('json', 'jsonl', 'csv', 'tsv', 'yaml')

# Column order for CSV/TSV output
SUMMARY_FIELDS = [
    'name',
    'repo',
    'status',
    'default_branch',
    'last_default_commit_at',
    'default_branch_stale',
    'branches',
    'stale_branches',
    'tagged_versions',
    'published_versions',
    'unpublished_versions',
    'untagged_versions',
    'url',
    'ci_build_url',
]


def format_output(data: Iterable[Dict[str, Any]], format: str,
                  fields: Optional[List[str]] = None) -> Iterator[str]:
    """
    Format project dictionaries according to the specified format.

    Args:
        data: Iterable of ProjectRecord.to_dict() dictionaries
        format: Output format (json, jsonl, csv, tsv, yaml)
        fields: Optional list of columns to include (for CSV/TSV)

    Yields:
        Formatted strings for output
    """
    if format == "jsonl":
        for item in data:
            yield json.dumps(item, ensure_ascii=False)
    elif format == "json":
        yield json.dumps(list(data), ensure_ascii=False, indent=2)
    elif format == "yaml":
        yield yaml.dump(list(data), default_flow_style=False, allow_unicode=True, sort_keys=False)
    elif format == "csv":
        yield from format_delimited(data, fields, delimiter=',')
    elif format == "tsv":
        yield from format_delimited(data, fields, delimiter='\t')
    else:
        raise ValueError(f"Unknown format: {format}")


def summarize_project(item: Dict[str, Any]) -> Dict[str, Any]:
    """
    Reduce a project dictionary to flat summary columns.

    Example:
        {'name': 'ANC', 'versions': [{'version': '1.0.0', 'has_tag': True,
         'published_url': None}], ...}
        -> {'name': 'ANC', 'tagged_versions': '1.0.0',
            'unpublished_versions': '1.0.0', ...}
    """
    branches = item.get('branches') or []
    versions = item.get('versions') or []

    def names(values, key):
        return ', '.join(str(v[key]) for v in values)

    return {
        'name': item.get('name', ''),
        'repo': item.get('repo', ''),
        'status': 'unavailable' if item.get('error') else 'ok',
        'default_branch': item.get('default_branch', ''),
        'last_default_commit_at': item.get('last_default_commit_at') or '',
        'default_branch_stale': bool(item.get('default_branch_stale')),
        'branches': names(branches, 'name'),
        'stale_branches': names([b for b in branches if b.get('is_stale')], 'name'),
        'tagged_versions': names([v for v in versions if v.get('has_tag')], 'version'),
        'published_versions': names([v for v in versions if v.get('published_url') is not None], 'version'),
        'unpublished_versions': names([v for v in versions if v.get('published_url') is None], 'version'),
        'untagged_versions': names([v for v in versions if not v.get('has_tag')], 'version'),
        'url': item.get('url', ''),
        'ci_build_url': item.get('ci_build_url', ''),
    }


def format_delimited(data: Iterable[Dict[str, Any]], fields: Optional[List[str]] = None,
                     delimiter: str = ',') -> Iterator[str]:
    """Format project summaries as CSV (or TSV with delimiter='\\t')."""
    rows = [summarize_project(item) for item in data]
    if not rows:
        return

    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=fields or SUMMARY_FIELDS,
                            delimiter=delimiter, extrasaction='ignore')
    writer.writeheader()
    for row in rows:
        writer.writerow(row)

    yield output.getvalue()


def get_format_from_env(default: str = 'jsonl') -> str:
    """
    Get output format from the PUBSTATUS_FORMAT environment variable.

    Unknown values fall back to the default.
    """
    format = os.environ.get('PUBSTATUS_FORMAT', default).lower()
    if format not in FORMATS + ('table',):
        return default
    return format
