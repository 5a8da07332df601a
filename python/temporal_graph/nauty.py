"""
nauty.py — Multigraph Generation via nauty

Pipeline:
  geng -c <n> <m> -q  |  multig -T -e<M> -q  >  <output>

geng enumerates connected simple graphs with n vertices and m edges,
multig distributes M total edges over them. The output lines use the
multigraph text format read by formats.Multigraph.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path
from typing import List, Optional, Union

logger = logging.getLogger(__name__)


class NautyError(RuntimeError):
    """Raised when a nauty binary is missing or exits with an error."""
    pass


def _require(binary: str) -> str:
    path = shutil.which(binary)
    if path is None:
        raise NautyError(f"{binary} not found on PATH. Is nauty installed?")
    return path


def _run(cmd: List[str], stdin: Optional[bytes] = None) -> bytes:
    try:
        proc = subprocess.run(cmd, input=stdin, capture_output=True, check=False)
    except OSError as e:
        raise NautyError(f"Failed to execute {cmd[0]}: {e}")

    if proc.returncode != 0:
        raise NautyError(
            f"{Path(cmd[0]).name} failed with status {proc.returncode}. "
            f"stderr: {proc.stderr.decode('utf-8', errors='replace').strip()}"
        )
    return proc.stdout


def validate_parameters(n: int, m: int, big_m: int) -> None:
    if n <= 0:
        raise ValueError("Number of vertices must be positive")
    if big_m < m:
        raise ValueError(f"Total edges M={big_m} must be >= base edges m={m}")
    max_edges = n * (n - 1) // 2
    if m > max_edges:
        raise ValueError(f"Base edges m={m} exceeds maximum {max_edges} for {n} vertices")


def generate_multigraphs_nauty(n: int, m: int, big_m: int, filename: Union[str, Path]) -> int:
    """
    Write all connected multigraphs (n vertices, m base edges, M total edges)
    to `filename`. Returns the number of multigraphs written.
    """
    validate_parameters(n, m, big_m)

    geng = _require("geng")
    multig = _require("multig")

    logger.info("Generating multigraphs: n=%d m=%d M=%d -> %s", n, m, big_m, filename)

    base_graphs = _run([geng, "-c", str(n), str(m), "-q"])
    multigraphs = _run([multig, "-T", f"-e{big_m}", "-q"], stdin=base_graphs)

    path = Path(filename)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(multigraphs)

    count = sum(1 for line in multigraphs.decode("utf-8").splitlines() if line.strip())
    logger.info("Generated %d multigraphs", count)
    return count
