"""Parser for job shop instance files.

Format::

    # optional comment lines (inline ``#`` comments are allowed too)
    J M
    m d m d ... (M pairs)     <- one line per job, in execution order

Machine indices may be 0-based or 1-based; 1-based files (no machine 0,
all indices in ``1..M``) are normalised to 0-based.
"""

from __future__ import annotations

import os

from jobshop.models import Instance, Job


def _content_lines(text: str) -> list[tuple[int, list[str]]]:
    lines = []
    for number, raw in enumerate(text.splitlines(), start=1):
        tokens = raw.split("#", 1)[0].split()
        if tokens:
            lines.append((number, tokens))
    return lines


def parse_instance_text(text: str, name: str = "instance") -> Instance:
    """Parse instance data from a string.

    Raises:
        ValueError: On a malformed header, missing job lines, wrong token
            count, negative duration or machine index out of range.
    """
    lines = _content_lines(text)
    if not lines:
        raise ValueError("Empty instance")
    header_line, header = lines[0]
    if len(header) != 2:
        raise ValueError(f"Line {header_line}: header must be 'jobs machines'")
    try:
        jobs_number, machines_number = int(header[0]), int(header[1])
    except ValueError:
        raise ValueError(f"Line {header_line}: header must contain integers") from None
    if jobs_number <= 0 or machines_number <= 0:
        raise ValueError(f"Line {header_line}: jobs and machines must be positive")

    job_lines = lines[1:]
    if len(job_lines) < jobs_number:
        raise ValueError(f"Expected {jobs_number} job lines, found {len(job_lines)}")

    raw_jobs: list[list[Job]] = []
    for line_number, tokens in job_lines[:jobs_number]:
        if len(tokens) != 2 * machines_number:
            raise ValueError(
                f"Line {line_number}: expected {2 * machines_number} numbers, got {len(tokens)}"
            )
        try:
            values = [int(t) for t in tokens]
        except ValueError:
            raise ValueError(f"Line {line_number}: non-integer token") from None
        job = [(values[i], values[i + 1]) for i in range(0, len(values), 2)]
        for _, duration in job:
            if duration < 0:
                raise ValueError(f"Line {line_number}: processing time must be non-negative")
        raw_jobs.append(job)

    all_machines = {m for job in raw_jobs for (m, _) in job}
    one_based = 0 not in all_machines and all(1 <= m <= machines_number for m in all_machines)
    jobs = [[(m - 1 if one_based else m, d) for (m, d) in job] for job in raw_jobs]
    for j, job in enumerate(jobs):
        for m, _ in job:
            if not (0 <= m < machines_number):
                raise ValueError(f"Job {j}: machine index out of range: {m}")

    return Instance(
        jobs=jobs,
        jobs_number=jobs_number,
        machines_number=machines_number,
        name=name,
    )


def parse_instance(file_path: str) -> Instance:
    """Parse an instance file; the instance is named after the file."""
    with open(file_path, "r", encoding="utf-8") as f:
        text = f.read()
    return parse_instance_text(text, name=os.path.basename(file_path))
