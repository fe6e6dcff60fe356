"""Two-Line Element import and export.

Scenario orbits can be exported as standard NORAD TLEs for use in other
tools, and TLE files already on disk can be read back as orbital elements
(for example, to populate the tracked-object set for risk estimates).

Both directions use the same near-circular simplification as the
propagator: mean anomaly and true anomaly are taken to be equal, and the
semi-major axis follows directly from mean motion via ``n = sqrt(μ/a³)``.
Drag terms are written as zero.

References:
    - Kelso, T.S. "CelesTrak TLE Format Documentation"
      https://celestrak.org/columns/v04n03/
"""

from __future__ import annotations

import math
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

from .elements import EARTH, TWO_PI, CentralBody, OrbitalElements

logger = logging.getLogger(__name__)

SOLAR_DAY = 86400.0
"""Seconds in a solar day."""

TLE_LINE_LENGTH = 69


@dataclass(slots=True)
class TLERecord:
    """One element set as read from a TLE file.

    Angles are in degrees and the epoch is a naive UTC datetime. Only the
    fields needed to rebuild orbital elements (plus identification) are
    kept; the mean-motion derivatives are dropped.
    """

    name: Optional[str]
    norad_id: int
    classification: str
    intl_designator: str
    epoch: datetime
    bstar: float
    inclination: float
    raan: float
    eccentricity: float
    arg_perigee: float
    mean_anomaly: float
    mean_motion: float  # rev/day
    rev_number: int

    @staticmethod
    def parse(line1: str, line2: str, name: Optional[str] = None) -> TLERecord:
        """Parse line 1 and line 2 of a TLE.

        Raises:
            ValueError: If a line is malformed or the catalog numbers differ.
        """
        first = _prepare_line(line1, 1)
        second = _prepare_line(line2, 2)

        catalog_1 = int(first[2:7])
        catalog_2 = int(second[2:7])
        if catalog_1 != catalog_2:
            raise ValueError(f"NORAD ID mismatch: line 1 has {catalog_1}, line 2 has {catalog_2}")

        two_digit_year = int(first[18:20])
        year = two_digit_year + (1900 if two_digit_year >= 57 else 2000)
        epoch = datetime(year, 1, 1) + timedelta(days=float(first[20:32]) - 1.0)

        return TLERecord(
            name=name.strip() or None if name else None,
            norad_id=catalog_1,
            classification=first[7],
            intl_designator=first[9:17].strip(),
            epoch=epoch,
            bstar=_parse_implied_decimal(first[53:61]),
            inclination=float(second[8:16]),
            raan=float(second[17:25]),
            eccentricity=float("0." + second[26:33].strip()),
            arg_perigee=float(second[34:42]),
            mean_anomaly=float(second[43:51]),
            mean_motion=float(second[52:63]),
            rev_number=int(second[63:68].strip() or 0),
        )

    def semi_major_axis(self, body: CentralBody = EARTH) -> float:
        """Semi-major axis implied by the mean motion (km)."""
        n = self.mean_motion * TWO_PI / SOLAR_DAY
        return (body.mu / (n * n)) ** (1.0 / 3.0)

    def to_elements(self, body: CentralBody = EARTH) -> OrbitalElements:
        """Convert to Keplerian elements (true anomaly := mean anomaly)."""
        return OrbitalElements(
            semi_major_axis=self.semi_major_axis(body),
            eccentricity=self.eccentricity,
            inclination=self.inclination,
            raan=self.raan,
            arg_perigee=self.arg_perigee,
            true_anomaly=self.mean_anomaly,
        )


def parse_tle_batch(text: str) -> list[TLERecord]:
    """Parse every 2-line or 3-line TLE in ``text``, in order.

    A line directly preceding a line 1 / line 2 pair is taken as the object
    name. Any other stray line is skipped.
    """
    rows = [row.rstrip() for row in text.splitlines() if row.strip()]
    records: list[TLERecord] = []
    pending_name: Optional[str] = None

    idx = 0
    while idx < len(rows):
        row = rows[idx]
        following = rows[idx + 1] if idx + 1 < len(rows) else ""
        if row.startswith("1 ") and following.startswith("2 "):
            records.append(TLERecord.parse(row, following, name=pending_name))
            pending_name = None
            idx += 2
            continue

        if pending_name is not None:
            logger.debug("Skipping unrecognized TLE line: %r", pending_name[:24])
        pending_name = row
        idx += 1

    return records


def load_tle_file(filepath: str | Path) -> list[TLERecord]:
    """Read every element set in a TLE file."""
    return parse_tle_batch(Path(filepath).read_text())


def format_tle(
    elements: OrbitalElements,
    norad_id: int,
    epoch: datetime,
    body: CentralBody = EARTH,
    intl_designator: str = "00000A",
    classification: str = "U",
    element_set: int = 999,
    rev_number: int = 0,
) -> tuple[str, str]:
    """Format elements as a two-line element set with valid checksums.

    Args:
        elements: Orbit to export.
        norad_id: Catalog number (0-99999).
        epoch: Element epoch (naive values are taken as UTC).
        body: Central body used to derive mean motion.
        intl_designator: International designator, up to 8 characters.
        classification: Single-character classification.
        element_set: Element set number (0-9999).
        rev_number: Revolution number at epoch (0-99999).

    Returns:
        ``(line1, line2)``, each 69 characters.
    """
    if not 0 <= norad_id <= 99999:
        raise ValueError(f"NORAD ID must fit in 5 digits, got {norad_id}")
    if len(intl_designator) > 8:
        raise ValueError(f"International designator too long: {intl_designator!r}")

    if epoch.tzinfo is not None:
        epoch = epoch.astimezone(timezone.utc).replace(tzinfo=None)
    day_of_year = (epoch - datetime(epoch.year, 1, 1)).total_seconds() / SOLAR_DAY + 1.0

    n_rad_s = math.sqrt(body.mu / elements.semi_major_axis**3)
    mean_motion = n_rad_s * SOLAR_DAY / TWO_PI
    mean_motion_field = f"{mean_motion:11.8f}"
    if len(mean_motion_field) != 11:
        raise ValueError(f"Mean motion {mean_motion:.4f} rev/day does not fit a TLE")

    ecc_digits = round(elements.eccentricity * 1e7)
    if ecc_digits > 9999999:
        raise ValueError(f"Eccentricity {elements.eccentricity} does not fit a TLE")

    line1 = (
        f"1 {norad_id:05d}{classification[:1] or 'U'} "
        f"{intl_designator:<8} "
        f"{epoch.year % 100:02d}{day_of_year:012.8f} "
        f" .00000000  00000-0  00000-0 0 "
        f"{element_set % 10000:>4d}"
    )
    line2 = (
        f"2 {norad_id:05d} "
        f"{elements.inclination:8.4f} "
        f"{elements.raan % 360.0:8.4f} "
        f"{ecc_digits:07d} "
        f"{elements.arg_perigee % 360.0:8.4f} "
        f"{elements.true_anomaly % 360.0:8.4f} "
        f"{mean_motion_field}"
        f"{rev_number % 100000:5d}"
    )
    return line1 + str(tle_checksum(line1)), line2 + str(tle_checksum(line2))


def tle_checksum(line: str) -> int:
    """Modulo-10 checksum over the first 68 columns.

    Digits count at face value, minus signs count as 1, everything else 0.
    """
    body = line[:TLE_LINE_LENGTH - 1]
    return (sum(int(ch) for ch in body if ch.isdigit()) + body.count("-")) % 10


# ── Private helpers ──


def _prepare_line(line: str, number: int) -> str:
    """Pad ``line`` to full width, check its line number and checksum."""
    padded = line.rstrip().ljust(TLE_LINE_LENGTH)
    if padded[0] != str(number):
        raise ValueError(f"Line {number} must start with '{number}', got {padded[0]!r}")

    stated = padded[TLE_LINE_LENGTH - 1]
    if stated.isdigit():
        computed = tle_checksum(padded)
        if int(stated) != computed:
            logger.warning(
                "Checksum mismatch on line %d (stated %s, computed %d)",
                number, stated, computed,
            )
    return padded


def _parse_implied_decimal(field: str) -> float:
    """Parse TLE implied-decimal notation (``16538-4`` → ``0.16538e-4``)."""
    text = field.strip()
    if not text:
        return 0.0

    sign = "-" if text[0] == "-" else ""
    text = text.lstrip("+-")
    if len(text) > 2 and text[-2] in "+-":
        return float(f"{sign}0.{text[:-2]}e{text[-2:]}")
    return float(f"{sign}0.{text}")
