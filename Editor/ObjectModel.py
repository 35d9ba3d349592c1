"""
Placed object model - containers, positions, data payloads and editor errors
"""

from enum import Enum

from EditorConfig import REGION_WIDTH, REGION_HEIGHT, DEFAULT_DATA_LENGTH

#########################################
# Editor Errors
#########################################

class EditorError(Exception):
    """Base class for errors surfaced to the user by the object editor"""

class ObjectValidationError(EditorError, ValueError):
    """Bad user input, missing address, or nothing selected"""

class ObjectLimitError(EditorError):
    """Stage object table is full"""

class StageCountError(EditorError, RuntimeError):
    """Reloaded ROM does not have the same number of stages"""

#########################################
# Containers
#########################################

class Container(Enum):
    """Which object table an object is stored in"""
    ALL_TABLES = 'All tables'
    REGION_TABLE = 'Region table'
    INITIAL_TABLE = 'Initial table'

    def __str__(self):
        return self.name

def is_visible(container, show_filter):
    """Check a container against a table filter (None hides everything)"""
    if isinstance(container, PlacedObject):
        container = container.container
    return (show_filter is not None and
            (show_filter == Container.ALL_TABLES
             or container == Container.ALL_TABLES
             or show_filter == container))

#########################################
# Region Geometry
#########################################

def split_position(absolute_x, absolute_y, region_width=REGION_WIDTH, region_height=REGION_HEIGHT):
    """Split an absolute position into (region_x, region_y, relative_x, relative_y)"""
    region_x, relative_x = divmod(absolute_x, region_width)
    region_y, relative_y = divmod(absolute_y, region_height)
    return region_x, region_y, relative_x, relative_y

def join_position(region_x, region_y, relative_x, relative_y,
                  region_width=REGION_WIDTH, region_height=REGION_HEIGHT):
    """Inverse of split_position"""
    return (region_x * region_width + relative_x,
            region_y * region_height + relative_y)

#########################################
# Placed Object
#########################################

class PlacedObject:
    """One object placed on a stage map

    The absolute position is the stored value; region and relative
    coordinates are always recomputed from it.
    """

    def __init__(self, absolute_x, absolute_y, allocation_address=0, obj_type=0,
                 data=None, container=Container.REGION_TABLE, length_rule=None):
        """
        Args:
            absolute_x, absolute_y: World position in stage pixels
            allocation_address: 16-bit RAM address of the object slot
            obj_type: 16-bit object type
            data: Additional data bytes (defaults to zeroes)
            container: Container the object belongs to
            length_rule: Optional callable (type, container) -> data length
        """
        self.length_rule = length_rule
        self._type = obj_type & 0xFFFF
        self._container = Container(container)
        self._absolute_x = 0
        self._absolute_y = 0
        self.set_absolute_position(absolute_x, absolute_y)
        self.allocation_address = allocation_address

        if data is None:
            length = self.required_data_length(self._type, self._container)
            data = bytes(length if length is not None else DEFAULT_DATA_LENGTH)
        self._fixed_length = len(data)
        self._data = b''
        self.data = data

    @classmethod
    def from_region(cls, region_x, region_y, relative_x, relative_y, **kwargs):
        """Create an object from region + relative coordinates"""
        x, y = join_position(region_x, region_y, relative_x, relative_y)
        return cls(x, y, **kwargs)

    def __repr__(self):
        return (f"PlacedObject(type=0x{self._type:04X}, pos=({self._absolute_x}, {self._absolute_y}), "
                f"addr=0x{self._allocation_address:04X}, container={self._container})")

    # Position

    @property
    def absolute_x(self):
        return self._absolute_x

    @property
    def absolute_y(self):
        return self._absolute_y

    @property
    def absolute_position(self):
        return self._absolute_x, self._absolute_y

    def set_absolute_position(self, x, y):
        x = int(x)
        y = int(y)
        if x < 0 or y < 0:
            raise ValueError(f"Position must not be negative: ({x}, {y})")
        self._absolute_x = x
        self._absolute_y = y

    @property
    def region_x(self):
        return split_position(self._absolute_x, self._absolute_y)[0]

    @property
    def region_y(self):
        return split_position(self._absolute_x, self._absolute_y)[1]

    @property
    def relative_x(self):
        return split_position(self._absolute_x, self._absolute_y)[2]

    @property
    def relative_y(self):
        return split_position(self._absolute_x, self._absolute_y)[3]

    # Fields

    @property
    def type(self):
        return self._type

    @type.setter
    def type(self, value):
        self._type = int(value) & 0xFFFF

    @property
    def container(self):
        return self._container

    @container.setter
    def container(self, value):
        self._container = Container(value)

    @property
    def allocation_address(self):
        return self._allocation_address

    @allocation_address.setter
    def allocation_address(self, value):
        self._allocation_address = int(value) & 0xFFFF

    def required_data_length(self, obj_type=None, container=None):
        """Data length mandated for a type/container pair (current values by default)"""
        if obj_type is None:
            obj_type = self._type
        if container is None:
            container = self._container
        if self.length_rule is not None:
            return int(self.length_rule(obj_type & 0xFFFF, container))
        return getattr(self, '_fixed_length', None)

    @property
    def data_length(self):
        return self.required_data_length()

    @property
    def data(self):
        return self._data

    @data.setter
    def data(self, value):
        value = bytes(value)
        if len(value) != self.data_length:
            raise ValueError(f"Data must be {self.data_length} bytes, got {len(value)}")
        self._data = value
