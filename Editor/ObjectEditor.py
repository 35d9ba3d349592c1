"""
Object editing - hex entry filtering, field encoding and the edit/add sessions
"""

import logging

from EditorConfig import TYPE_HEX_DIGITS
from ObjectModel import Container, PlacedObject, ObjectValidationError

HEX_DIGITS = '0123456789ABCDEF'

#########################################
# Hex Entry Filtering
#########################################

def filter_hex_string(text):
    """Uppercase and drop everything that isn't a hex digit or whitespace"""
    return ''.join(c for c in text.upper() if c in HEX_DIGITS or c.isspace())

def without_spaces(text):
    return ''.join(c for c in text if not c.isspace())

def length_without_spaces(text):
    return sum(1 for c in text if not c.isspace())

def index_with_spaces(text, index_without_spaces):
    """String index of the n-th non-whitespace character (len(text) past the end)"""
    counter = 0
    for i, c in enumerate(text):
        if not c.isspace():
            if counter == index_without_spaces:
                return i
            counter += 1
    if index_without_spaces >= 0:
        return len(text)
    return -1

def limit_hex_input(current, offset, length, text, max_digits):
    """Replace current[offset:offset+length] with text, keeping at most max_digits digits

    Inserted text is filtered first. When the insert doesn't fit it is cut
    down; when nothing fits the entry is left as it was.
    """
    text = filter_hex_string(text)
    removed = length_without_spaces(current[offset:offset + length])
    current_len = length_without_spaces(current)
    text_len = length_without_spaces(text)

    if current_len + text_len - removed <= max_digits:
        insert = text
    elif current_len - removed < max_digits:
        insert = text[:index_with_spaces(text, max_digits - current_len + removed)]
    else:
        return current
    return current[:offset] + insert + current[offset + length:]

def sanitize_hex_entry(text, max_digits):
    """Filter a whole entry value down to at most max_digits hex digits"""
    text = filter_hex_string(text)
    if length_without_spaces(text) > max_digits:
        text = text[:index_with_spaces(text, max_digits)]
    return text

#########################################
# Hex Encoding
#########################################

def hex_byte(value):
    return f'{value & 0xFF:02X}'

def hex_short(value):
    return f'{value & 0xFFFF:04X}'

def bytes_to_hex_string(data):
    """b'\\x01\\xab' -> '01 AB'"""
    if data is None:
        return 'null'
    return ' '.join(hex_byte(b) for b in data)

def hex_to_bytes(digits):
    """Hex digits to bytes, a trailing odd digit becomes the high nibble"""
    digits = without_spaces(digits)
    result = bytearray((len(digits) + 1) // 2)
    for i in range(0, len(digits), 2):
        high = int(digits[i], 16)
        low = int(digits[i + 1], 16) if i + 1 < len(digits) else 0
        result[i // 2] = (high << 4) | low
    return bytes(result)

def resize_data(data, length):
    """Truncate or zero-pad to exactly length bytes"""
    data = bytes(data[:length])
    return data + bytes(length - len(data))

def parse_type(text):
    """Type entry -> 16-bit int (empty means 0)"""
    digits = without_spaces(filter_hex_string(text or ''))
    if not digits:
        return 0
    if len(digits) > TYPE_HEX_DIGITS:
        raise ObjectValidationError(f"Type must be at most {TYPE_HEX_DIGITS} hex digits: \"{text}\"")
    return int(digits, 16)

def parse_data(text, length):
    """Data entry -> exactly `length` bytes"""
    digits = without_spaces(filter_hex_string(text or ''))
    return resize_data(hex_to_bytes(digits), length)

#########################################
# Editing Sessions
#########################################

class EditSession:
    """Pending changes to one object

    Nothing touches the object until apply(); a failed validation leaves it
    exactly as it was.
    """

    def __init__(self, obj, allocator):
        self.target = obj
        self.allocator = allocator
        self.type_text = hex_short(obj.type)
        self.data_text = bytes_to_hex_string(obj.data)
        self.container = obj.container
        self.address = obj.allocation_address
        self.address_changed = False

    def set_type_text(self, text):
        self.type_text = sanitize_hex_entry(text, TYPE_HEX_DIGITS)
        return self.type_text

    def data_digits(self, type_text=None, container=None):
        """Hex digits the data field holds for the entered type and container"""
        try:
            obj_type = parse_type(self.type_text if type_text is None else type_text)
        except ObjectValidationError:
            obj_type = self.target.type
        container = Container(self.container if container is None else container)
        return self.target.required_data_length(obj_type, container) * 2

    def set_data_text(self, text):
        self.data_text = sanitize_hex_entry(text, self.data_digits())
        return self.data_text

    def set_container(self, container):
        self.container = Container(container)

    def occupancy(self):
        """Block table without the object being edited"""
        return self.allocator.occupancy_table(exclude=self.target)

    def initial_block(self):
        return self.allocator.initial_selection(self.target)

    def choose_block(self, index):
        """Use the start of a block row as the new allocation address"""
        self.address = self.allocator.select_block(index)
        self.address_changed = True
        logging.info(f"Selected allocation block 0x{self.address:04X}")
        return self.address

    def validate(self):
        """Parse all fields, returns (type, data, container)"""
        obj_type = parse_type(self.type_text)
        container = Container(self.container)
        length = self.target.required_data_length(obj_type, container)
        data = parse_data(self.data_text, length)
        return obj_type, data, container

    def _assign(self, obj_type, data, container):
        obj = self.target
        obj.type = obj_type
        obj.container = container
        obj.data = data
        if self.address_changed:
            obj.allocation_address = self.address

    def apply(self):
        """Write the session back to the object, returns True if the type changed"""
        obj_type, data, container = self.validate()
        type_changed = obj_type != self.target.type
        self._assign(obj_type, data, container)
        logging.info(f"Edited object 0x{self.target.type:04X} at "
                     f"({self.target.absolute_x}, {self.target.absolute_y})")
        return type_changed

class AddSession(EditSession):
    """A new object waiting for its fields and an allocation address"""

    def __init__(self, registry, allocator, x, y, length_rule=None):
        registry.check_capacity()
        draft = PlacedObject(max(0, int(round(x))), max(0, int(round(y))), 0, 0,
                             container=Container.REGION_TABLE, length_rule=length_rule)
        super().__init__(draft, allocator)
        self.registry = registry

    @property
    def address_selected(self):
        return self.address_changed

    def commit(self):
        """Add the new object to the stage and return it"""
        if not self.address_changed:
            raise ObjectValidationError("No allocation address selected.")
        self.registry.check_capacity()
        obj_type, data, container = self.validate()
        self._assign(obj_type, data, container)
        return self.registry.add(self.target)
