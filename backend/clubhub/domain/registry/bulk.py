"""Parse pasted ``id,name,department`` lines into teacher entries."""

from __future__ import annotations

import csv
import io
from typing import List

from pydantic import ValidationError

from clubhub.domain.registry import policy, schemas
from clubhub.domain.registry.models import DEPARTMENTS


def parse_teacher_lines(text: str) -> List[schemas.TeacherCreateRequest]:
	"""Return every entry, or raise listing all malformed lines (1-based).

	Blank lines are ignored. Nothing is returned unless every line is valid.
	"""
	if not text or not text.strip():
		raise policy.RegistryValidationError("bulk_import_empty")
	entries: List[schemas.TeacherCreateRequest] = []
	errors: List[str] = []
	reader = csv.reader(io.StringIO(text.strip()), skipinitialspace=True)
	for index, row in enumerate(reader, start=1):
		parts = [part.strip() for part in row]
		if not any(parts):
			continue
		if len(parts) != 3:
			errors.append(f"line {index}: expected 3 comma-separated fields")
			continue
		teacher_id, name, department = parts
		if len(teacher_id) != 4:
			errors.append(f"line {index}: teacher id must be 4 characters ({teacher_id})")
			continue
		if department not in DEPARTMENTS:
			errors.append(f"line {index}: unknown department ({department})")
			continue
		try:
			entries.append(schemas.TeacherCreateRequest(id=teacher_id, name=name, department=department))
		except ValidationError as exc:
			errors.append(f"line {index}: {exc.errors()[0]['msg']}")
	if errors:
		raise policy.RegistryValidationError("bulk_import_invalid", details=errors)
	if not entries:
		raise policy.RegistryValidationError("bulk_import_empty")
	return entries
