"""
Stage display - tkinter view of one stage with the description panel and object dialogs
"""

import logging
import tkinter as tk
from tkinter import messagebox, ttk

import numpy as np
from PIL import ImageTk

from EditorConfig import (setup_logging, EDITOR_VERSION, EMPTY_BLOCK_COLOR, USED_BLOCK_COLOR,
                          TYPE_OUTLINE_COLORS, TYPE_FILL_COLORS, TYPE_HEX_DIGITS,
                          BUTTON_PRIMARY, BUTTON_MIDDLE, BUTTON_SECONDARY)
from ObjectModel import Container, PlacedObject, EditorError
from ObjectEditor import limit_hex_input, hex_short, bytes_to_hex_string, AddSession
from StageRender import render_stage_image, format_block_row
from StageSet import StageSet
from ZoomAnimator import TkFrameScheduler

FILTER_CHOICES = [
    ('all', "Show all tables", Container.ALL_TABLES),
    ('region', "Show region table", Container.REGION_TABLE),
    ('initial', "Show initial table", Container.INITIAL_TABLE),
    ('hide', "Hide all tables", None),
]

#########################################
# Object Dialogs
#########################################

class HexEntry(ttk.Entry):
    """Entry accepting hex digits and spaces up to a digit budget"""

    def __init__(self, parent, max_digits, **kwargs):
        super().__init__(parent, **kwargs)
        self.max_digits = max_digits
        vcmd = (self.register(self._validate), '%d', '%i', '%S', '%s', '%P')
        self.configure(validate='key', validatecommand=vcmd)

    def _validate(self, action, index, inserted, current, proposed):
        if action != '1':
            return True
        index = int(index)
        limited = limit_hex_input(current, index, 0, inserted, self.max_digits())
        if limited == proposed:
            return True
        if limited != current:
            cursor = index + len(limited) - len(current)
            self.after_idle(lambda: self._replace(limited, cursor))
        return False

    def _replace(self, text, cursor):
        self.delete(0, tk.END)
        self.insert(0, text)
        self.icursor(cursor)

class AddressDialog:
    """Modal list of allocation blocks with their current users"""

    def __init__(self, parent, session, on_chosen):
        self.session = session
        self.on_chosen = on_chosen
        allocator = session.allocator

        self.window = tk.Toplevel(parent)
        self.window.title("Edit Address")
        self.window.transient(parent)

        main_frame = ttk.Frame(self.window, padding=10)
        main_frame.pack(fill=tk.BOTH, expand=True)

        ttk.Label(main_frame, text="Available Memory Blocks", font=('Arial', 10, 'bold')).pack(pady=5)

        list_frame = ttk.Frame(main_frame)
        list_frame.pack(fill=tk.BOTH, expand=True)
        self.listbox = tk.Listbox(list_frame, width=48, height=20, exportselection=False,
                                  font=('Courier', 10))
        scroll = ttk.Scrollbar(list_frame, orient=tk.VERTICAL, command=self.listbox.yview)
        self.listbox.configure(yscrollcommand=scroll.set)
        self.listbox.pack(side=tk.LEFT, fill=tk.BOTH, expand=True)
        scroll.pack(side=tk.RIGHT, fill=tk.Y)

        for i, (block_start, objects) in enumerate(session.occupancy().items()):
            self.listbox.insert(tk.END, format_block_row(block_start, objects, allocator.block_size))
            self.listbox.itemconfig(i, background=USED_BLOCK_COLOR if objects else EMPTY_BLOCK_COLOR)

        self.selected_var = tk.StringVar(value="No block selected")
        ttk.Label(main_frame, textvariable=self.selected_var).pack(pady=5)
        self.listbox.bind('<<ListboxSelect>>', lambda e: self.on_select())

        initial = session.initial_block()
        if initial is not None:
            self.listbox.selection_set(initial)
            self.listbox.see(initial)
            self.on_select()

        button_frame = ttk.Frame(main_frame)
        button_frame.pack(fill=tk.X, pady=5)
        ttk.Button(button_frame, text="Cancel", command=self.window.destroy).pack(side=tk.RIGHT, padx=5)
        ttk.Button(button_frame, text="Ok", command=self.on_ok).pack(side=tk.RIGHT, padx=5)

        self.window.grab_set()

    def current_index(self):
        selection = self.listbox.curselection()
        return selection[0] if selection else None

    def on_select(self):
        index = self.current_index()
        if index is None:
            self.selected_var.set("No block selected")
        else:
            self.selected_var.set(f"Selected block: 0x{hex_short(self.session.allocator.block_start(index))}")

    def on_ok(self):
        try:
            address = self.session.choose_block(self.current_index())
        except EditorError as e:
            messagebox.showerror("Error", str(e), parent=self.window)
            return
        self.window.destroy()
        self.on_chosen(address)

class ObjectDialog:
    """Edit or Add dialog driven by an EditSession/AddSession"""

    def __init__(self, parent, session, on_done):
        self.session = session
        self.on_done = on_done
        self.adding = isinstance(session, AddSession)

        self.window = tk.Toplevel(parent)
        self.window.title("Add object" if self.adding else "Edit object")
        self.window.transient(parent)

        main_frame = ttk.Frame(self.window, padding=10)
        main_frame.pack(fill=tk.BOTH, expand=True)

        # Allocation address
        address_frame = ttk.Frame(main_frame)
        address_frame.pack(fill=tk.X, pady=2)
        self.address_var = tk.StringVar()
        self.update_address_label()
        ttk.Label(address_frame, textvariable=self.address_var).pack(side=tk.LEFT)
        ttk.Button(address_frame, text="Edit", command=self.open_address_dialog).pack(side=tk.RIGHT)

        # Type
        type_frame = ttk.Frame(main_frame)
        type_frame.pack(fill=tk.X, pady=2)
        ttk.Label(type_frame, text="Type: ", width=10).pack(side=tk.LEFT)
        self.type_entry = HexEntry(type_frame, lambda: TYPE_HEX_DIGITS, width=8)
        self.type_entry.insert(0, session.type_text)
        self.type_entry.pack(side=tk.LEFT, fill=tk.X, expand=True)

        # Data
        data_frame = ttk.Frame(main_frame)
        data_frame.pack(fill=tk.X, pady=2)
        ttk.Label(data_frame, text="Data: ", width=10).pack(side=tk.LEFT)
        self.data_entry = HexEntry(data_frame, self.data_digits, width=32)
        self.data_entry.insert(0, session.data_text)
        self.data_entry.pack(side=tk.LEFT, fill=tk.X, expand=True)

        # Container
        container_frame = ttk.Frame(main_frame)
        container_frame.pack(fill=tk.X, pady=2)
        ttk.Label(container_frame, text="Container: ", width=10).pack(side=tk.LEFT)
        self.container_var = tk.StringVar(value=session.container.value)
        ttk.Combobox(container_frame, textvariable=self.container_var, state='readonly',
                     values=[c.value for c in Container]).pack(side=tk.LEFT, fill=tk.X, expand=True)

        button_frame = ttk.Frame(main_frame)
        button_frame.pack(fill=tk.X, pady=(10, 0))
        ttk.Button(button_frame, text="Cancel", command=self.window.destroy).pack(side=tk.RIGHT, padx=5)
        ttk.Button(button_frame, text="Save", command=self.on_save).pack(side=tk.RIGHT, padx=5)

        self.window.grab_set()
        self.type_entry.focus_set()

    def data_digits(self):
        """Data entry limit, following the type and container currently entered"""
        container = self.container_var.get() if hasattr(self, 'container_var') else None
        return self.session.data_digits(self.type_entry.get(), container)

    def update_address_label(self):
        if self.adding and not self.session.address_selected:
            self.address_var.set("Allocation address: [not selected]")
        else:
            self.address_var.set(f"Allocation address: 0x{hex_short(self.session.address)}")

    def open_address_dialog(self):
        AddressDialog(self.window, self.session, lambda address: self.update_address_label())

    def on_save(self):
        session = self.session
        session.set_type_text(self.type_entry.get())
        session.set_container(self.container_var.get())
        session.set_data_text(self.data_entry.get())
        try:
            result = session.commit() if self.adding else session.apply()
        except EditorError as e:
            logging.warning(f"{self.window.title()} failed: {e}")
            messagebox.showerror(self.window.title(), str(e), parent=self.window)
            return
        self.window.destroy()
        self.on_done(result)

#########################################
# Stage Display Widget
#########################################

class StageDisplay:
    """Canvas view of one stage with the description panel beside it"""

    def __init__(self, parent, stage_set, stage_id, outline_colors=None, fill_colors=None):
        self.stage_set = stage_set
        self.stage_id = stage_id
        self.stage = stage_set.stage(stage_id)
        self.outline_colors = outline_colors if outline_colors is not None else TYPE_OUTLINE_COLORS
        self.fill_colors = fill_colors if fill_colors is not None else TYPE_FILL_COLORS
        self.canvas_image = None
        self._redraw_pending = False

        self.frame = ttk.Frame(parent)
        self.canvas = tk.Canvas(self.frame, bg='black', highlightthickness=0, cursor='crosshair')
        self.canvas.pack(side=tk.LEFT, fill=tk.BOTH, expand=True)

        self.panel = ttk.Frame(self.frame, width=300, padding=5)
        self.panel.pack(side=tk.RIGHT, fill=tk.Y)
        self.build_panel()
        self.bind_events()

        self.stage.viewport.add_listener(self.request_redraw)
        self.stage.selection.selection_listeners.append(self.update_description)
        self.stage.selection.move_listeners.append(self.update_description)
        self.update_description(self.stage.selection.selected)

    @property
    def window(self):
        return self.frame.winfo_toplevel()

    def build_panel(self):
        ttk.Label(self.panel, text="Selected Object", font=('Arial', 10, 'bold')).pack(pady=5)

        self.info_vars = {}
        for key in ('type', 'description', 'region', 'relative', 'absolute', 'address', 'data', 'container'):
            self.info_vars[key] = tk.StringVar()
            ttk.Label(self.panel, textvariable=self.info_vars[key], wraplength=280).pack(anchor='w')

        button_frame = ttk.Frame(self.panel)
        button_frame.pack(fill=tk.X, pady=5)
        ttk.Button(button_frame, text="Edit", command=self.open_edit_dialog).pack(side=tk.LEFT, padx=2)
        ttk.Button(button_frame, text="Remove", command=self.remove_selected).pack(side=tk.LEFT, padx=2)
        ttk.Button(button_frame, text="Add...", command=self.open_add_dialog).pack(side=tk.LEFT, padx=2)

        ttk.Separator(self.panel, orient=tk.HORIZONTAL).pack(fill=tk.X, pady=10)

        # Table filter
        self.filter_var = tk.StringVar(value='all')
        for key, label, _ in FILTER_CHOICES:
            ttk.Radiobutton(self.panel, text=label, value=key, variable=self.filter_var,
                            command=self.on_filter_changed).pack(anchor='w')

        ttk.Separator(self.panel, orient=tk.HORIZONTAL).pack(fill=tk.X, pady=10)

        # Zoom controls
        scale_frame = ttk.Frame(self.panel)
        scale_frame.pack(fill=tk.X, pady=2)
        ttk.Label(scale_frame, text="Scale:").pack(side=tk.LEFT)
        self.scale_entry = ttk.Entry(scale_frame, width=10)
        self.scale_entry.pack(side=tk.LEFT, padx=5)
        ttk.Button(scale_frame, text="Set", command=self.set_scale).pack(side=tk.LEFT)

        self.smooth_var = tk.BooleanVar(value=self.stage_set.smooth_zoom)
        ttk.Checkbutton(self.panel, text="Smooth zoom", variable=self.smooth_var,
                        command=lambda: setattr(self.stage_set, 'smooth_zoom', self.smooth_var.get())).pack(anchor='w')

        self.status_var = tk.StringVar(value="Ready")
        ttk.Label(self.panel, textvariable=self.status_var).pack(side=tk.BOTTOM, anchor='w')

    def bind_events(self):
        canvas = self.canvas
        for button in (BUTTON_PRIMARY, BUTTON_MIDDLE, BUTTON_SECONDARY):
            canvas.bind(f"<ButtonPress-{button}>", lambda e, b=button: self.on_press(e, b))
            canvas.bind(f"<B{button}-Motion>", lambda e: self.stage.selection.drag(e.x, e.y))
            canvas.bind(f"<ButtonRelease-{button}>", lambda e, b=button: self.stage.selection.release(e.x, e.y, b))

        # Windows/macOS report wheel deltas, X11 sends buttons 4 and 5
        canvas.bind("<MouseWheel>", lambda e: self.on_wheel(e, -e.delta / 120 if abs(e.delta) >= 120 else -e.delta))
        canvas.bind("<Button-4>", lambda e: self.on_wheel(e, -1))
        canvas.bind("<Button-5>", lambda e: self.on_wheel(e, 1))

        canvas.bind("<Configure>", lambda e: self.stage.viewport.set_display_size(e.width, e.height))
        canvas.bind("<Delete>", lambda e: self.remove_selected(silent=True))
        canvas.bind("<BackSpace>", lambda e: self.remove_selected(silent=True))
        canvas.bind("<Control-e>", lambda e: self.open_edit_dialog())

    #########################################
    # Event Handlers
    #########################################

    def on_press(self, event, button):
        self.canvas.focus_set()
        self.stage.selection.press(event.x, event.y, button)

    def on_wheel(self, event, tick):
        if tick == 0:
            return
        self.stage.animator.zoom(tick, event.x, event.y)

    def on_filter_changed(self):
        show_filter = {key: value for key, _, value in FILTER_CHOICES}[self.filter_var.get()]
        self.stage.selection.set_filter(show_filter)

    def set_scale(self):
        try:
            scale = self.stage_set.set_scale_from_text(self.stage_id, self.scale_entry.get())
        except EditorError as e:
            logging.warning(f"Set scale failed: {e}")
            messagebox.showerror("Set scale", str(e))
            return
        self.status_var.set(f"Scale set to {scale:g}")

    def remove_selected(self, silent=False):
        try:
            obj = self.stage_set.remove_selected(self.stage_id)
        except EditorError as e:
            if not silent:
                messagebox.showerror("Error", str(e))
            return
        self.status_var.set(f"Removed object 0x{hex_short(obj.type)}")

    def open_edit_dialog(self):
        try:
            session = self.stage_set.begin_edit(self.stage_id)
        except EditorError as e:
            messagebox.showerror("Edit object", str(e))
            return
        ObjectDialog(self.window, session, self.on_edited)

    def open_add_dialog(self):
        vp = self.stage.viewport
        try:
            session = self.stage_set.begin_add(self.stage_id, vp.pan_x, vp.pan_y)
        except EditorError as e:
            logging.warning(f"Add object refused: {e}")
            messagebox.showerror("Add Object", str(e))
            return
        ObjectDialog(self.window, session, self.on_added)

    def on_edited(self, type_changed):
        self.update_description(self.stage.selection.selected)
        self.stage.viewport.invalidate()
        self.status_var.set("Object updated" if not type_changed else "Object type changed")

    def on_added(self, obj):
        self.stage.selection.select(obj)
        self.status_var.set(f"Added object 0x{hex_short(obj.type)}")

    #########################################
    # Drawing
    #########################################

    def update_description(self, obj):
        v = self.info_vars
        if obj is None:
            v['type'].set("[No object selected]")
            for key in ('description', 'region', 'relative', 'absolute', 'address', 'data', 'container'):
                v[key].set("")
            return
        v['type'].set(f"Type: 0x{hex_short(obj.type)}")
        v['description'].set(f"Description: {self.stage_set.describe(obj.type)}")
        v['region'].set(f"Region: ({obj.region_x}, {obj.region_y})")
        v['relative'].set(f"Relative position: (x = {obj.relative_x}, y = {obj.relative_y})")
        v['absolute'].set(f"Absolute position: (x = {obj.absolute_x}, y = {obj.absolute_y})")
        v['address'].set(f"Allocation address: 0x{hex_short(obj.allocation_address)}")
        v['data'].set(f"Additional data: {bytes_to_hex_string(obj.data)}")
        v['container'].set(f"Container: {obj.container.value}")

    def request_redraw(self):
        """Coalesce view changes into one redraw per idle cycle"""
        if self._redraw_pending:
            return
        self._redraw_pending = True
        self.canvas.after_idle(self.redraw)

    def redraw(self):
        self._redraw_pending = False
        width = self.canvas.winfo_width()
        height = self.canvas.winfo_height()
        frame = render_stage_image(self.stage, width, height, self.outline_colors, self.fill_colors)
        self.canvas_image = ImageTk.PhotoImage(frame)
        self.canvas.delete('all')
        self.canvas.create_image(0, 0, image=self.canvas_image, anchor='nw')
        self.stage.viewport.dirty = False

#########################################
# Demo
#########################################

def demo_stages(count=3, width=768, height=512, seed=0):
    """Generated backgrounds with a few random objects per stage"""
    rng = np.random.default_rng(seed)
    yy, xx = np.mgrid[0:height, 0:width]
    stages = []
    for i in range(count):
        pixels = np.zeros((height, width, 3), dtype=np.uint8)
        checker = ((xx // 32 + yy // 32) % 2).astype(np.uint8)
        pixels[:, :, 0] = 40 + checker * 30 + i * 40
        pixels[:, :, 1] = 60 + (yy * 100 // height)
        pixels[:, :, 2] = 80 + (xx * 100 // width)

        types = list(TYPE_OUTLINE_COLORS)
        objects = []
        for _ in range(20):
            x = int(rng.integers(0, width))
            y = int(rng.integers(0, height))
            objects.append(PlacedObject(x, y, 0xE140 + int(rng.integers(0, 100)) * 0x40,
                                        types[int(rng.integers(0, len(types)))],
                                        container=Container.REGION_TABLE if rng.random() < 0.7
                                        else Container.INITIAL_TABLE))
        # Stacked pair
        objects.append(PlacedObject(objects[0].absolute_x, objects[0].absolute_y, 0xE140, 0x0001))
        stages.append((pixels, objects))
    return stages

def main():
    setup_logging()
    root = tk.Tk()
    root.title(f"Object Editor {EDITOR_VERSION}")
    root.geometry("1100x600")

    stage_set = StageSet(scheduler_factory=lambda: TkFrameScheduler(root))
    stage_set.load(demo_stages())

    notebook = ttk.Notebook(root)
    notebook.pack(fill=tk.BOTH, expand=True)
    displays = []
    for i in range(len(stage_set)):
        display = StageDisplay(notebook, stage_set, i)
        notebook.add(display.frame, text=stage_set.stage_name(i))
        displays.append(display)

    def on_close():
        stage_set.shutdown()
        root.destroy()

    root.protocol("WM_DELETE_WINDOW", on_close)
    logging.info(f"Object editor {EDITOR_VERSION} started with {len(displays)} stages")
    root.mainloop()

if __name__ == '__main__':
    main()
