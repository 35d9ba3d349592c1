"""
Tests for placed objects, containers and region geometry.
"""
import pytest

from ObjectModel import (PlacedObject, Container, is_visible, split_position, join_position,
                         EditorError, ObjectValidationError, ObjectLimitError, StageCountError)


class TestRegionGeometry:
    """Tests for absolute <-> region/relative conversion."""

    def test_split_position(self):
        """Absolute positions split into 256 pixel regions."""
        assert split_position(0x234, 0x15) == (2, 0, 0x34, 0x15)
        assert split_position(0x100, 0x1FF) == (1, 1, 0, 0xFF)

    def test_join_is_inverse(self):
        """join_position undoes split_position."""
        for x, y in [(0, 0), (255, 256), (1000, 37), (0x7FF, 0x3FF)]:
            assert join_position(*split_position(x, y)) == (x, y)

    def test_from_region(self):
        """Objects can be created from region + relative coordinates."""
        obj = PlacedObject.from_region(3, 1, 0x10, 0x20)
        assert obj.absolute_position == (0x310, 0x120)
        assert (obj.region_x, obj.region_y) == (3, 1)
        assert (obj.relative_x, obj.relative_y) == (0x10, 0x20)


class TestPlacedObject:
    """Tests for PlacedObject fields."""

    def test_defaults(self):
        """A bare object has type 0, 8 zero data bytes and sits in the region table."""
        obj = PlacedObject(10, 20)
        assert obj.type == 0
        assert obj.data == bytes(8)
        assert obj.container == Container.REGION_TABLE
        assert obj.allocation_address == 0

    def test_moving_updates_region(self):
        """Region and relative coordinates follow the absolute position."""
        obj = PlacedObject(10, 20)
        obj.set_absolute_position(0x105, 0x210)
        assert (obj.region_x, obj.region_y) == (1, 2)
        assert (obj.relative_x, obj.relative_y) == (5, 0x10)

    def test_negative_position_rejected(self):
        """Positions never go below zero."""
        obj = PlacedObject(10, 20)
        with pytest.raises(ValueError):
            obj.set_absolute_position(-1, 5)
        assert obj.absolute_position == (10, 20)

    def test_type_and_address_are_16_bit(self):
        """Type and allocation address are masked to 16 bits."""
        obj = PlacedObject(0, 0, 0x1E140, 0x10005)
        assert obj.type == 0x0005
        assert obj.allocation_address == 0xE140

    def test_data_length_is_enforced(self):
        """Data must match the object's data length."""
        obj = PlacedObject(0, 0, data=b'\x01\x02\x03')
        assert obj.data_length == 3
        obj.data = b'\x04\x05\x06'
        assert obj.data == b'\x04\x05\x06'
        with pytest.raises(ValueError):
            obj.data = b'\x01'

    def test_length_rule(self):
        """A length rule decides the data length from type and container."""
        def rule(obj_type, container):
            return 4 if obj_type == 0x10 else 8

        obj = PlacedObject(0, 0, obj_type=0x10, length_rule=rule)
        assert obj.data == bytes(4)
        assert obj.required_data_length(0x20) == 8

    def test_container_coercion(self):
        """Containers can be given by their display value."""
        obj = PlacedObject(0, 0, container='Initial table')
        assert obj.container is Container.INITIAL_TABLE
        assert str(obj.container) == 'INITIAL_TABLE'

    def test_identity_equality(self):
        """Two objects with equal fields are still different objects."""
        a = PlacedObject(1, 2)
        b = PlacedObject(1, 2)
        assert a != b


class TestTableFilter:
    """Tests for the show filter."""

    def test_all_tables_shows_everything(self):
        """ALL_TABLES filter shows every container."""
        for container in Container:
            assert is_visible(container, Container.ALL_TABLES)

    def test_single_table_filter(self):
        """A table filter shows its own table plus shared objects only."""
        assert is_visible(Container.REGION_TABLE, Container.REGION_TABLE)
        assert is_visible(Container.ALL_TABLES, Container.REGION_TABLE)
        assert not is_visible(Container.INITIAL_TABLE, Container.REGION_TABLE)
        assert not is_visible(Container.REGION_TABLE, Container.INITIAL_TABLE)

    def test_hide_all(self):
        """No filter hides everything."""
        for container in Container:
            assert not is_visible(container, None)

    def test_accepts_objects(self):
        """is_visible also takes an object."""
        obj = PlacedObject(0, 0, container=Container.INITIAL_TABLE)
        assert is_visible(obj, Container.INITIAL_TABLE)
        assert not is_visible(obj, Container.REGION_TABLE)


class TestErrors:
    """Tests for the editor error hierarchy."""

    def test_hierarchy(self):
        """Every editor error shares one base, validation errors are ValueErrors."""
        assert issubclass(ObjectValidationError, EditorError)
        assert issubclass(ObjectValidationError, ValueError)
        assert issubclass(ObjectLimitError, EditorError)
        assert issubclass(StageCountError, EditorError)
        assert issubclass(StageCountError, RuntimeError)
