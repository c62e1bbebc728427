"""
Row validation for client, worker and task datasets.

Each dataset type has a fixed set of required columns, an ID column
that must be unique and, for clients and workers, a few field-specific
checks.  All checks run on every validation pass and their issues are
accumulated; nothing short-circuits, so one row can carry several
issues across different columns.  A summary report describing the data
quality is returned alongside the list of issues.
"""

from __future__ import annotations

import json
import logging
import math
import re
from collections import Counter
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

DATA_TYPES = ('clients', 'workers', 'tasks')

REQUIRED_COLUMNS: Dict[str, List[str]] = {
    'clients': ['ClientID', 'ClientName', 'PriorityLevel', 'RequestedTaskIDs', 'AttributesJSON'],
    'workers': ['WorkerID', 'WorkerName', 'Skills', 'AvailableSlots', 'MaxLoadPerPhase'],
    'tasks': ['TaskID', 'TaskName', 'Category', 'Duration', 'RequiredSkills'],
}

ID_COLUMNS: Dict[str, str] = {
    'clients': 'ClientID',
    'workers': 'WorkerID',
    'tasks': 'TaskID',
}

PRIORITY_MIN = 1
PRIORITY_MAX = 5

_SLOT_BRACKETS = re.compile(r'[\[\]]')
# Numeric literal syntax accepted by browsers when coercing text to a number
_DECIMAL_LITERAL = re.compile(r'[+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|Infinity)')
_PREFIXED_LITERAL = re.compile(r'0(?:[xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)')


@dataclass
class ValidationIssue:
    """A located data defect with an optional suggested replacement."""

    row: int
    column: str
    error: str
    suggestion: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {'row': self.row, 'column': self.column, 'error': self.error}
        if self.suggestion is not None:
            data['suggestion'] = self.suggestion
        return data


def _is_blank(value: Any) -> bool:
    return value is None or value == ''


def _to_number(value: Any) -> Optional[float]:
    """Coerce a cell to a float, returning None for non-numeric text.

    Text follows browser number syntax: hex, octal and binary prefixes
    and ``Infinity`` are numbers, while ``inf``, ``nan`` and digit
    separators such as ``1_0`` are not.
    """
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return None if math.isnan(value) else float(value)
    text = str(value).strip()
    if not text:
        return None
    if _PREFIXED_LITERAL.fullmatch(text):
        return float(int(text, 0))
    if _DECIMAL_LITERAL.fullmatch(text):
        return float(text)
    return None


def _reject_constant(name: str) -> Any:
    raise ValueError(f'Invalid JSON constant: {name}')


def _is_valid_json(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return True
    if isinstance(value, (int, float)):
        return not (math.isnan(value) or math.isinf(value))
    try:
        json.loads(str(value), parse_constant=_reject_constant)
    except ValueError:
        return False
    return True


def check_required_columns(data: List[Dict[str, Any]], required: List[str]) -> List[ValidationIssue]:
    """Flag every row once for each required column missing from the header.

    The header is taken from the keys of the first row.  An empty
    dataset has no header and therefore produces no issues.
    """
    if not data:
        return []
    first_row = data[0]
    missing = [col for col in required if col not in first_row]
    if not missing:
        return []
    logger.warning(f"Missing required columns: {', '.join(missing)}")
    issues: List[ValidationIssue] = []
    for index in range(len(data)):
        for col in missing:
            issues.append(ValidationIssue(index, col, f'Missing required column: {col}'))
    return issues


def find_duplicate_ids(data: List[Dict[str, Any]], id_column: str) -> List[ValidationIssue]:
    """Flag every row whose non-empty ID occurs more than once."""
    seen: Dict[Any, List[int]] = {}
    for index, row in enumerate(data):
        row_id = row.get(id_column)
        if _is_blank(row_id):
            continue
        seen.setdefault(row_id, []).append(index)
    issues: List[ValidationIssue] = []
    for row_id, indices in seen.items():
        if len(indices) > 1:
            for index in indices:
                issues.append(ValidationIssue(index, id_column, f'Duplicate ID: {row_id}'))
    return issues


def check_priority_level(row: Dict[str, Any], index: int) -> Optional[ValidationIssue]:
    """Range-check PriorityLevel, suggesting the nearest bound when out of range."""
    value = row.get('PriorityLevel')
    if _is_blank(value):
        return None
    priority = _to_number(value)
    if priority is None or PRIORITY_MIN <= priority <= PRIORITY_MAX:
        return None
    clamped = max(PRIORITY_MIN, min(PRIORITY_MAX, priority))
    return ValidationIssue(
        index,
        'PriorityLevel',
        f'Priority must be between {PRIORITY_MIN}-{PRIORITY_MAX}',
        suggestion=str(int(clamped)),
    )


def check_attributes_json(row: Dict[str, Any], index: int) -> Optional[ValidationIssue]:
    if _is_valid_json(row.get('AttributesJSON')):
        return None
    return ValidationIssue(index, 'AttributesJSON', 'Invalid JSON format')


def check_available_slots(row: Dict[str, Any], index: int) -> Optional[ValidationIssue]:
    """Every comma-separated slot, brackets removed, must be numeric."""
    value = row.get('AvailableSlots')
    text = '' if value is None else str(value)
    tokens = [t for t in _SLOT_BRACKETS.sub('', text).split(',') if t.strip()]
    if any(_to_number(token) is None for token in tokens):
        return ValidationIssue(index, 'AvailableSlots', 'AvailableSlots contains non-numeric values')
    return None


FIELD_CHECKS = {
    'clients': [check_priority_level, check_attributes_json],
    'workers': [check_available_slots],
    'tasks': [],
}


class DatasetValidator:
    """Validate one dataset and summarise its quality.

    An instance is bound to a dataset type.  The primary entry point is
    ``validate`` which accepts a list of rows and returns an
    ``(issues, report)`` tuple.  The report contains counts of issues,
    a quality score and recommendations to improve the data.
    """

    def __init__(self, data_type: str) -> None:
        if data_type not in REQUIRED_COLUMNS:
            raise ValueError(f"Unknown data type: {data_type}")
        self.data_type = data_type
        self.required_columns = REQUIRED_COLUMNS[data_type]
        self.id_column = ID_COLUMNS[data_type]
        self.issues: List[ValidationIssue] = []
        self.stats: Dict[str, int] = {
            'total': 0,
            'rows_with_errors': 0,
            'clean_rows': 0,
            'errors': 0,
            'missing_columns': 0,
            'duplicate_ids': 0,
        }

    def validate(self, data: List[Dict[str, Any]]) -> Tuple[List[ValidationIssue], Dict[str, Any]]:
        """Run every check over ``data`` in order.

        The required-column check runs first, then the duplicate-ID
        check, then the field checks for each row.

        Args:
            data: The rows of the dataset, in display order.

        Returns:
            A tuple of (issues, report dictionary).
        """
        issues: List[ValidationIssue] = []
        missing = check_required_columns(data, self.required_columns)
        duplicates = find_duplicate_ids(data, self.id_column)
        issues.extend(missing)
        issues.extend(duplicates)
        for index, row in enumerate(data):
            for check in FIELD_CHECKS[self.data_type]:
                issue = check(row, index)
                if issue is not None:
                    issues.append(issue)
        self.issues = issues
        self.stats['total'] = len(data)
        self.stats['errors'] = len(issues)
        self.stats['missing_columns'] = len({issue.column for issue in missing})
        self.stats['duplicate_ids'] = len(duplicates)
        self.stats['rows_with_errors'] = len({issue.row for issue in issues})
        self.stats['clean_rows'] = self.stats['total'] - self.stats['rows_with_errors']
        logger.info(
            f"Validated {len(data)} {self.data_type} rows: {len(issues)} issues "
            f"across {self.stats['rows_with_errors']} rows"
        )
        return issues, self.generate_validation_report()

    def generate_validation_report(self) -> Dict[str, Any]:
        """Compile a report of validation statistics and recommendations."""
        total = self.stats['total']
        quality_score = (self.stats['clean_rows'] / total * 100) if total > 0 else 0
        by_column = Counter(issue.column for issue in self.issues)
        rows: Dict[int, List[str]] = {}
        for issue in self.issues:
            rows.setdefault(issue.row, []).append(f"{issue.column}: {issue.error}")
        report: Dict[str, Any] = {
            'data_type': self.data_type,
            'summary': self.stats.copy(),
            'quality_score': quality_score,
            'errors_by_column': dict(by_column),
            'recommendations': [],
            'problematic_rows': [
                {'row': row, 'issues': row_issues} for row, row_issues in sorted(rows.items())[:10]
            ],
        }
        if self.stats['missing_columns']:
            missing = sorted({i.column for i in self.issues if i.error.startswith('Missing required column')})
            report['recommendations'].append(
                f"Add the missing required columns ({', '.join(missing)}) to the {self.data_type} file."
            )
        if self.stats['duplicate_ids']:
            report['recommendations'].append(
                f"{self.stats['duplicate_ids']} rows share a {self.id_column}. Each {self.id_column} should be unique."
            )
        if any(issue.suggestion for issue in self.issues):
            report['recommendations'].append(
                'Some issues have suggested fixes. Use the AI fix action to review and apply them.'
            )
        return report


def validate_clients_data(data: List[Dict[str, Any]]) -> List[ValidationIssue]:
    return DatasetValidator('clients').validate(data)[0]


def validate_workers_data(data: List[Dict[str, Any]]) -> List[ValidationIssue]:
    return DatasetValidator('workers').validate(data)[0]


def validate_tasks_data(data: List[Dict[str, Any]]) -> List[ValidationIssue]:
    return DatasetValidator('tasks').validate(data)[0]


def validate_dataset(data_type: str, data: List[Dict[str, Any]]) -> Tuple[List[ValidationIssue], Dict[str, Any]]:
    """Validate ``data`` as the given dataset type."""
    return DatasetValidator(data_type).validate(data)
