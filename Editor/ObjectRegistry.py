"""
Ordered object table of one stage
"""

import logging

from EditorConfig import OBJECT_LIMIT
from ObjectModel import ObjectLimitError, is_visible

class ObjectRegistry:
    """The placed objects of a stage, in table order"""

    def __init__(self, objects=None, limit=OBJECT_LIMIT):
        self.limit = limit
        self._objects = list(objects) if objects is not None else []
        if len(self._objects) > self.limit:
            logging.warning(f"Stage loaded with {len(self._objects)} objects, limit is {self.limit}")

    def __iter__(self):
        return iter(self._objects)

    def __len__(self):
        return len(self._objects)

    def __getitem__(self, index):
        return self._objects[index]

    def __contains__(self, obj):
        return any(o is obj for o in self._objects)

    @property
    def objects(self):
        """Copy of the object list, e.g. for the ROM writer"""
        return list(self._objects)

    def index(self, obj):
        for i, o in enumerate(self._objects):
            if o is obj:
                return i
        raise ValueError(f"{obj!r} is not in this stage")

    def has_room(self):
        return len(self._objects) < self.limit

    def check_capacity(self):
        """Raise ObjectLimitError when no more objects fit"""
        if not self.has_room():
            raise ObjectLimitError("Object limit reached. Consider removing some objects first.")

    def add(self, obj):
        self.check_capacity()
        self._objects.append(obj)
        logging.info(f"Added object 0x{obj.type:04X} at ({obj.absolute_x}, {obj.absolute_y})")
        return obj

    def remove(self, obj):
        """Remove an object, returns False if it was not in the table"""
        for i, o in enumerate(self._objects):
            if o is obj:
                del self._objects[i]
                logging.info(f"Removed object 0x{obj.type:04X} at ({obj.absolute_x}, {obj.absolute_y})")
                return True
        return False

    def replace_all(self, objects):
        self._objects = list(objects)
        if len(self._objects) > self.limit:
            logging.warning(f"Stage reloaded with {len(self._objects)} objects, limit is {self.limit}")

    def visible(self, show_filter):
        """Objects passing the table filter, in table order"""
        return [obj for obj in self._objects if is_visible(obj.container, show_filter)]
