"""
Tests for CSV waypoint ingestion
"""

import io
import math
import struct

import pytest

from waypoint_mission.errors import (
    ActionError,
    EnumValueError,
    FormatError,
    MissionError,
    ParseError,
    RecordLengthError,
)
from waypoint_mission.mission import (
    POI,
    AltitudeMode,
    DistanceInterval,
    GimbalPitchMode,
    MissionConfig,
    PoiRegistry,
    RotateAircraftAction,
    StartRecordingAction,
    StayForAction,
    StopRecordingAction,
    TakePhotoAction,
    TiltCameraAction,
    TimeInterval,
    ingest,
    read_csv,
    read_csv_file,
)
from waypoint_mission.mission.csv_format import parse_record
from waypoint_mission.utils.geo import bearing


def f32(value):
    return struct.unpack('>f', struct.pack('>f', value))[0]


class TestRecordLength:
    """Test record width checks"""

    @pytest.mark.parametrize("length", [0, 1, 45, 47, 100])
    def test_wrong_length(self, length):
        """Wrong width fails before any field is parsed"""
        record = ["not-a-number"] * length

        with pytest.raises(RecordLengthError) as exc_info:
            ingest([record])

        assert exc_info.value.actual == length
        assert exc_info.value.expected == 46
        assert isinstance(exc_info.value, FormatError)

    def test_error_carries_row_index(self, row_factory):
        rows = [row_factory(), row_factory(), row_factory()[:10]]

        with pytest.raises(RecordLengthError) as exc_info:
            ingest(rows)

        assert exc_info.value.row == 2
        assert "row 2" in str(exc_info.value)


class TestFieldParsing:
    """Test numeric field parsing"""

    def test_simple_row(self, simple_row):
        mission = ingest([simple_row])

        assert len(mission.waypoints) == 1
        assert len(mission.pois) == 0

        wp = mission.waypoints[0]
        assert wp.coordinate.latitude == 10.0
        assert wp.coordinate.longitude == 20.0
        assert wp.altitude == 5.0
        assert wp.actions == (TakePhotoAction(),)
        assert wp.poi_index is None
        assert wp.photo_interval is None

    def test_typed_fields(self, row_factory):
        row = row_factory(lat="-33.8688", lon="151.2093", alt="42.5",
                          heading="-120", curve="0.2", rotation="1",
                          gimbal_mode="2", gimbal_pitch="-45",
                          altitude_mode="1", speed="7.5")
        wp = ingest([row]).waypoints[0]

        assert wp.coordinate.latitude == -33.8688
        assert wp.coordinate.longitude == 151.2093
        assert wp.altitude == 42.5
        assert wp.heading == -120.0
        assert wp.curve_size == f32(0.2)
        assert wp.rotation_dir == 1
        assert wp.gimbal_mode == GimbalPitchMode.INTERPOLATE
        assert wp.gimbal_pitch_angle == -45
        assert wp.altitude_mode == AltitudeMode.ABOVE_GROUND
        assert wp.speed == 7.5

    def test_waypoint_defaults(self, simple_row):
        wp = ingest([simple_row]).waypoints[0]

        assert wp.turn_mode == 0
        assert wp.repeat_actions == 1
        assert wp.stay_time == 3
        assert wp.max_reach_time == 0

    def test_float_field_rounded_to_float32(self, row_factory):
        wp = ingest([row_factory(alt="0.1")]).waypoints[0]

        assert wp.altitude == f32(0.1)
        assert wp.altitude != 0.1

    def test_malformed_float(self, row_factory):
        with pytest.raises(ParseError) as exc_info:
            ingest([row_factory(lat="abc")])

        assert exc_info.value.index == 0
        assert exc_info.value.literal == "abc"

    def test_int_field_rejects_decimal(self, row_factory):
        with pytest.raises(ParseError) as exc_info:
            ingest([row_factory(rotation="1.5")])

        assert exc_info.value.index == 5

    def test_int16_out_of_range(self, row_factory):
        with pytest.raises(ParseError) as exc_info:
            ingest([row_factory(altitude_mode="40000")])

        assert exc_info.value.type_name == "i16"
        assert exc_info.value.index == 38

    def test_float32_overflow(self, row_factory):
        with pytest.raises(ParseError):
            ingest([row_factory(speed="1e40")])

    @pytest.mark.parametrize("literal", ["inf", "-inf", "infinity", "nan"])
    def test_coordinate_must_be_finite(self, row_factory, literal):
        with pytest.raises(ParseError) as exc_info:
            ingest([row_factory(lat=literal)])

        assert exc_info.value.index == 0
        assert exc_info.value.type_name == "f64"

    def test_infinite_poi_coordinate(self, row_factory):
        with pytest.raises(ParseError) as exc_info:
            ingest([row_factory(), row_factory(poi=("inf", "20.5", "30", "0"))])

        assert exc_info.value.index == 40
        assert exc_info.value.row == 1

    def test_float32_field_accepts_infinity(self, row_factory):
        wp = ingest([row_factory(alt="inf")]).waypoints[0]
        assert wp.altitude == math.inf

    @pytest.mark.parametrize("literal", ["1_0", " 5", "5 ", "٣", "+", "0x10", ""])
    def test_int_literal_must_be_ascii_digits(self, row_factory, literal):
        with pytest.raises(ParseError) as exc_info:
            ingest([row_factory(rotation=literal)])

        assert exc_info.value.index == 5

    @pytest.mark.parametrize("literal", ["1_0.5", " 5.0", "٣.5", "1e", "."])
    def test_float_literal_must_be_ascii(self, row_factory, literal):
        with pytest.raises(ParseError) as exc_info:
            ingest([row_factory(speed=literal)])

        assert exc_info.value.index == 39

    @pytest.mark.parametrize("literal,expected", [
        ("+7", 7), ("-7", -7), ("007", 7),
    ])
    def test_int_literal_forms(self, row_factory, literal, expected):
        assert ingest([row_factory(rotation=literal)]).waypoints[0].rotation_dir == expected

    @pytest.mark.parametrize("literal,expected", [
        ("1.", 1.0), (".5", 0.5), ("+2.5e1", 25.0), ("-3E-1", f32(-0.3)),
    ])
    def test_float_literal_forms(self, row_factory, literal, expected):
        assert ingest([row_factory(speed=literal)]).waypoints[0].speed == expected


class TestEnums:
    """Test enumeration decoding"""

    def test_invalid_gimbal_mode(self, row_factory):
        with pytest.raises(EnumValueError) as exc_info:
            ingest([row_factory(gimbal_mode="3")])

        assert exc_info.value.value == 3
        assert isinstance(exc_info.value, FormatError)

    def test_invalid_altitude_mode(self, row_factory):
        with pytest.raises(EnumValueError) as exc_info:
            ingest([row_factory(altitude_mode="-1")])

        assert exc_info.value.value == -1

    def test_invalid_poi_altitude_mode_without_poi(self, row_factory):
        """POI altitude mode is checked even when no POI is formed"""
        with pytest.raises(EnumValueError) as exc_info:
            ingest([row_factory(poi=("0", "0", "0", "5"))])

        assert exc_info.value.value == 5


class TestActions:
    """Test action slot decoding"""

    def test_all_action_types(self, row_factory):
        row = row_factory(actions=[(0, 1500), (1, 0), (2, 0), (3, 0), (4, 90), (5, -30)])
        actions = ingest([row]).waypoints[0].actions

        assert actions == (
            StayForAction(1.5),
            TakePhotoAction(),
            StartRecordingAction(),
            StopRecordingAction(),
            RotateAircraftAction(90),
            TiltCameraAction(-30),
        )

    def test_sentinels_dropped_and_order_kept(self, row_factory):
        row = row_factory(actions=[(-1, 0), (2, 0), (-1, 99), (3, 0)])
        actions = ingest([row]).waypoints[0].actions

        assert actions == (StartRecordingAction(), StopRecordingAction())

    def test_stay_for_milliseconds(self, row_factory):
        row = row_factory(actions=[(0, 250)])
        action = ingest([row]).waypoints[0].actions[0]

        assert action.seconds == 0.25
        assert action.code_and_param() == (0, 250)

    def test_fifteen_actions(self, row_factory):
        row = row_factory(actions=[(1, 0)] * 15)

        assert len(ingest([row]).waypoints[0].actions) == 15

    def test_invalid_action_type(self, row_factory):
        row = row_factory(actions=[(7, 0)])

        with pytest.raises(ActionError) as exc_info:
            ingest([row])

        assert exc_info.value.action_type == 7

    def test_invalid_action_in_later_slot(self, row_factory):
        row = row_factory(actions=[(1, 0), (1, 0), (-2, 0)])

        with pytest.raises(ActionError) as exc_info:
            ingest([row])

        assert exc_info.value.action_type == -2


class TestPhotoInterval:
    """Test photo interval resolution"""

    def test_time_interval(self, row_factory):
        wp = ingest([row_factory(photo_time="2.5")]).waypoints[0]
        assert wp.photo_interval == TimeInterval(2.5)

    def test_distance_interval(self, row_factory):
        wp = ingest([row_factory(photo_distance="50")]).waypoints[0]
        assert wp.photo_interval == DistanceInterval(50.0)

    def test_time_takes_precedence(self, row_factory):
        wp = ingest([row_factory(photo_time="3", photo_distance="50")]).waypoints[0]
        assert wp.photo_interval == TimeInterval(3.0)

    @pytest.mark.parametrize("time_s,distance_m", [("0", "0"), ("-1", "-1"), ("0", "-5")])
    def test_no_interval(self, row_factory, time_s, distance_m):
        wp = ingest([row_factory(photo_time=time_s, photo_distance=distance_m)]).waypoints[0]
        assert wp.photo_interval is None


class TestPOI:
    """Test POI detection and deduplication"""

    def test_shared_poi_deduplicated(self, poi_rows):
        mission = ingest(poi_rows)

        assert len(mission.waypoints) == 2
        assert len(mission.pois) == 1
        assert mission.waypoints[0].poi_index == 0
        assert mission.waypoints[1].poi_index == 0

    def test_poi_values(self, poi_rows):
        poi = ingest(poi_rows).pois[0]

        assert poi == POI(10.5, 20.5, 30.0, AltitudeMode.ABSOLUTE)

    @pytest.mark.parametrize("poi", [
        ("0", "0", "0", "0"),
        ("10.5", "0", "30", "0"),
        ("0", "20.5", "30", "0"),
        ("10.5", "20.5", "0", "0"),
    ])
    def test_zero_fields_mean_no_poi(self, row_factory, poi):
        mission = ingest([row_factory(heading="12", poi=poi)])

        assert len(mission.pois) == 0
        assert mission.waypoints[0].poi_index is None
        assert mission.waypoints[0].heading == 12.0

    def test_discovery_order(self, row_factory):
        a = ("1.0", "2.0", "3.0", "0")
        b = ("4.0", "5.0", "6.0", "0")
        rows = [row_factory(poi=b), row_factory(poi=a), row_factory(poi=b)]
        mission = ingest(rows)

        assert [p.latitude for p in mission.pois] == [4.0, 1.0]
        assert [wp.poi_index for wp in mission.waypoints] == [0, 1, 0]

    def test_altitude_mode_distinguishes_pois(self, row_factory):
        rows = [
            row_factory(poi=("1.0", "2.0", "3.0", "0")),
            row_factory(poi=("1.0", "2.0", "3.0", "1")),
        ]
        mission = ingest(rows)

        assert len(mission.pois) == 2
        assert [wp.poi_index for wp in mission.waypoints] == [0, 1]

    def test_no_epsilon_tolerance(self, row_factory):
        rows = [
            row_factory(poi=("1.0", "2.0", "3.0", "0")),
            row_factory(poi=("1.0000000001", "2.0", "3.0", "0")),
        ]
        assert len(ingest(rows).pois) == 2

    def test_heading_overridden_by_bearing(self, poi_rows):
        mission = ingest(poi_rows)

        for wp in mission.waypoints:
            expected = bearing(wp.coordinate.latitude, wp.coordinate.longitude, 10.5, 20.5)
            if expected > 180:
                expected -= 360
            assert wp.heading == pytest.approx(expected, abs=1e-4)

        assert mission.waypoints[0].heading != 45.0
        assert mission.waypoints[1].heading != -90.0

    def test_heading_due_east(self, row_factory):
        row = row_factory(lat="0.0", lon="10.0", poi=("0.0000001", "11.0", "5", "0"))
        wp = ingest([row]).waypoints[0]

        assert wp.heading == pytest.approx(90.0, abs=1e-3)

    def test_heading_west_is_negative(self, row_factory):
        row = row_factory(lat="10.0", lon="20.0", poi=("10.0", "19.0", "5", "0"))
        wp = ingest([row]).waypoints[0]

        assert -180.0 <= wp.heading < 0


class TestPoiRegistry:
    """Test the POI registry directly"""

    def test_resolve_returns_new_index(self):
        registry = PoiRegistry()

        assert registry.resolve(POI(1.0, 2.0, 3.0)) == 0
        assert registry.resolve(POI(4.0, 5.0, 6.0)) == 1
        assert registry.resolve(POI(1.0, 2.0, 3.0)) == 0
        assert len(registry) == 2

    def test_pois_is_a_copy(self):
        registry = PoiRegistry()
        registry.resolve(POI(1.0, 2.0, 3.0))

        registry.pois.clear()
        assert len(registry) == 1


class TestIngest:
    """Test whole-source ingestion"""

    def test_empty_source(self):
        mission = ingest([])

        assert mission.waypoints == ()
        assert mission.pois == ()

    def test_default_config(self, simple_row):
        assert ingest([simple_row]).config == MissionConfig()

    def test_custom_config(self, simple_row):
        config = MissionConfig(cruising_speed=5.0)
        assert ingest([simple_row], config).config is config

    def test_first_error_stops_processing(self, row_factory):
        consumed = []

        def rows():
            for row in [row_factory(), row_factory(actions=[(9, 0)]), row_factory()]:
                consumed.append(row)
                yield row

        with pytest.raises(MissionError) as exc_info:
            ingest(rows())

        assert exc_info.value.row == 1
        assert len(consumed) == 2

    def test_parse_record_leaves_poi_unresolved(self, poi_rows):
        waypoint, poi = parse_record(poi_rows[0])

        assert waypoint.poi_index is None
        assert waypoint.heading == 45.0
        assert poi is not None


class TestReadCsv:
    """Test CSV stream reading"""

    def test_read_stream(self, csv_text):
        mission = read_csv(io.StringIO(csv_text))

        assert len(mission.waypoints) == 3
        assert len(mission.pois) == 1
        assert mission.waypoints[0].actions == (StayForAction(2.0), TakePhotoAction())
        assert mission.waypoints[1].poi_index == 0
        assert mission.waypoints[2].photo_interval == TimeInterval(2.5)

    def test_without_header(self, csv_text):
        body = csv_text.split("\n", 1)[1]
        mission = read_csv(io.StringIO(body), has_header=False)

        assert len(mission.waypoints) == 3

    def test_header_is_not_parsed(self, csv_text):
        """Parsing the header as data fails on the first field"""
        with pytest.raises(ParseError):
            read_csv(io.StringIO(csv_text), has_header=False)

    def test_blank_lines_skipped(self, csv_text):
        mission = read_csv(io.StringIO(csv_text + "\n\n"))
        assert len(mission.waypoints) == 3

    def test_read_file(self, tmp_path, csv_text):
        path = tmp_path / "mission.csv"
        path.write_text(csv_text)

        mission = read_csv_file(path)
        assert len(mission.waypoints) == 3
        assert math.isclose(mission.waypoints[0].coordinate.latitude, 48.8566)
