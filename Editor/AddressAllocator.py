"""
Allocation address blocks - which objects use which RAM block
"""

from EditorConfig import ALLOC_START, ALLOC_END, ALLOC_BLOCK_SIZE
from ObjectModel import ObjectValidationError

class AddressAllocator:
    """Splits [start, end) into fixed-size blocks and reports who uses each one

    Sharing a block is allowed; occupancy is shown for the user to judge.
    """

    def __init__(self, registry, start=ALLOC_START, end=ALLOC_END, block_size=ALLOC_BLOCK_SIZE):
        self.registry = registry
        self.start = start
        self.end = end
        self.block_size = block_size

    @property
    def block_count(self):
        return (self.end - self.start) // self.block_size

    def block_start(self, index):
        if not 0 <= index < self.block_count:
            raise IndexError(f"Block {index} out of range (0-{self.block_count - 1})")
        return self.start + index * self.block_size

    def block_end(self, index):
        """Last address inside the block"""
        return self.block_start(index) + self.block_size - 1

    def block_starts(self):
        return [self.start + i * self.block_size for i in range(self.block_count)]

    def block_index(self, address):
        """Block holding an address, or None outside the range"""
        address &= 0xFFFF
        if not self.start <= address < self.start + self.block_count * self.block_size:
            return None
        return (address - self.start) // self.block_size

    def occupancy_of(self, block_start, exclude=None):
        """Objects (except `exclude`) whose address falls inside the block"""
        block_end = block_start + self.block_size
        return [obj for obj in self.registry
                if obj is not exclude and block_start <= obj.allocation_address < block_end]

    def occupancy_table(self, exclude=None):
        """{block_start: [objects]} for every block, empty blocks included"""
        table = {block_start: [] for block_start in self.block_starts()}
        for obj in self.registry:
            if obj is exclude:
                continue
            index = self.block_index(obj.allocation_address)
            if index is not None:
                table[self.start + index * self.block_size].append(obj)
        return table

    def is_free(self, block_start, exclude=None):
        return not self.occupancy_of(block_start, exclude)

    def initial_selection(self, obj):
        """Row to preselect for an object, None if its address is outside the range"""
        return self.block_index(obj.allocation_address)

    def select_block(self, index):
        """Allocation address for a chosen block row"""
        if index is None or index < 0:
            raise ObjectValidationError("Select a memory address first.")
        return self.block_start(index)
