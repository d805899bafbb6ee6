"""
Pytest configuration and fixtures
"""

import pytest
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))


def make_row(lat="10.0", lon="20.0", alt="5.0", heading="0", curve="0",
             rotation="0", gimbal_mode="0", gimbal_pitch="0",
             actions=None, altitude_mode="0", speed="0",
             poi=("0", "0", "0", "0"), photo_time="-1", photo_distance="-1"):
    """
    Build one 46-field waypoint row

    actions: list of (type, param) pairs, remaining slots are empty
    poi: (latitude, longitude, altitude, altitude mode)
    """
    slots = list(actions or [])
    slots += [(-1, 0)] * (15 - len(slots))

    row = [lat, lon, alt, heading, curve, rotation, gimbal_mode, gimbal_pitch]
    for action_type, param in slots:
        row += [str(action_type), str(param)]
    row += [altitude_mode, speed, *poi, photo_time, photo_distance]
    return row


@pytest.fixture
def row_factory():
    """Fixture returning the row builder"""
    return make_row


@pytest.fixture
def simple_row():
    """Single row with one TakePhoto action and no POI"""
    return make_row(actions=[(1, 0)])


@pytest.fixture
def poi_rows():
    """Two rows sharing the same POI"""
    poi = ("10.5", "20.5", "30.0", "0")
    return [
        make_row(lat="10.0", lon="20.0", heading="45", poi=poi),
        make_row(lat="11.0", lon="21.0", heading="-90", poi=poi),
    ]


@pytest.fixture
def csv_text():
    """CSV document with header line and three waypoints"""
    header = ",".join(f"col{i}" for i in range(46))
    rows = [
        make_row(lat="48.8566", lon="2.3522", alt="30", actions=[(0, 2000), (1, 0)]),
        make_row(lat="48.8570", lon="2.3530", alt="35",
                 poi=("48.8580", "2.3540", "10", "0")),
        make_row(lat="48.8575", lon="2.3535", alt="30", photo_time="2.5"),
    ]
    lines = [header] + [",".join(r) for r in rows]
    return "\n".join(lines) + "\n"
