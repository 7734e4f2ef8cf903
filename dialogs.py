"""Dialog windows for the Poké Index application."""

import customtkinter as ctk

from constants import COLORS, DETAIL_SPRITE_SIZE, STAT_MAX_VALUE
from data_controller import DataController
from models import PokemonRecord, StatKind
from sprites import SpriteManager


class PokemonDetailDialog:
    """Window showing everything known about one Pokémon."""

    def __init__(self, parent: ctk.CTk, record: PokemonRecord,
                 sprite_manager: SpriteManager, controller: DataController):
        """
        Initialize the detail dialog.

        Args:
            parent: Parent window
            record: The Pokémon to show
            sprite_manager: Source of the Pokémon's image
            controller: Used to download whatever the Pokémon still lacks
        """
        self.dialog = ctk.CTkToplevel(parent)
        self.dialog.title(record.display_name)
        self.dialog.geometry("440x600")
        self.dialog.transient(parent)

        self.record = record
        self.sprite_manager = sprite_manager
        self.controller = controller
        self.stat_widgets = []

        self._setup_ui()
        self._render()

        self.controller.store.subscribe(self._on_store_changed)
        self.dialog.protocol("WM_DELETE_WINDOW", self.close)
        self.dialog.bind("<Escape>", lambda e: self.close())
        self._center_dialog(parent)

        self.controller.start_next_download(record)

    def _setup_ui(self) -> None:
        """Setup the dialog UI elements."""
        main_frame = ctk.CTkFrame(self.dialog)
        main_frame.pack(fill="both", expand=True, padx=20, pady=20)

        # Header: image, name and number
        header_frame = ctk.CTkFrame(main_frame)
        header_frame.pack(fill="x", pady=(0, 15))

        self.image_label = ctk.CTkLabel(header_frame, text="")
        self.image_label.pack(side="left", padx=15, pady=10)

        title_frame = ctk.CTkFrame(header_frame, fg_color="transparent")
        title_frame.pack(side="left", fill="x", expand=True)

        self.name_label = ctk.CTkLabel(
            title_frame,
            text=self.record.display_name,
            font=ctk.CTkFont(size=22, weight="bold"),
            anchor="w"
        )
        self.name_label.pack(fill="x")

        self.number_label = ctk.CTkLabel(
            title_frame,
            text="",
            font=ctk.CTkFont(size=14),
            text_color=COLORS["secondary_text"],
            anchor="w"
        )
        self.number_label.pack(fill="x")

        self.types_label = ctk.CTkLabel(title_frame, text="", font=ctk.CTkFont(size=14), anchor="w")
        self.types_label.pack(fill="x")

        # Measurements
        measures_frame = ctk.CTkFrame(main_frame)
        measures_frame.pack(fill="x", pady=(0, 15))
        measures_frame.grid_columnconfigure(1, weight=1)

        self.measure_labels = {}
        for row, title in enumerate(("Height", "Weight", "Base Experience")):
            ctk.CTkLabel(measures_frame, text=title, anchor="w").grid(
                row=row, column=0, sticky="w", padx=15, pady=4)
            value_label = ctk.CTkLabel(measures_frame, text="", text_color=COLORS["secondary_text"], anchor="e")
            value_label.grid(row=row, column=1, sticky="e", padx=15, pady=4)
            self.measure_labels[title] = value_label

        # Statistics, rebuilt on every render
        self.stats_frame = ctk.CTkFrame(main_frame)
        self.stats_frame.pack(fill="both", expand=True)
        self.stats_frame.grid_columnconfigure(0, weight=1)

    def _render(self) -> None:
        """Show the current state of the record."""
        record = self.record
        self.image_label.configure(image=self.sprite_manager.get_sprite(record, DETAIL_SPRITE_SIZE))
        self.number_label.configure(text=record.formatted_number if record.number > 0 else "")
        self.types_label.configure(text=" / ".join(t.kind.label for t in record.sorted_types))

        self.measure_labels["Height"].configure(
            text=record.height_description if record.height else "Unknown")
        self.measure_labels["Weight"].configure(
            text=record.weight_description if record.weight else "Unknown")
        self.measure_labels["Base Experience"].configure(
            text=str(record.base_experience) if record.base_experience else "Unknown")

        for widget in self.stat_widgets:
            widget.destroy()
        self.stat_widgets = []

        kinds = list(StatKind)
        statistics = sorted(record.statistics, key=lambda s: kinds.index(s.kind))
        if not statistics:
            return

        for index, statistic in enumerate(statistics):
            row = index * 2
            title = ctk.CTkLabel(self.stats_frame, text=statistic.kind.label, anchor="w")
            title.grid(row=row, column=0, sticky="w", padx=15, pady=(6, 0))
            value = ctk.CTkLabel(self.stats_frame, text=str(statistic.value),
                                 text_color=COLORS["secondary_text"], anchor="e")
            value.grid(row=row, column=1, sticky="e", padx=15, pady=(6, 0))
            bar = ctk.CTkProgressBar(self.stats_frame, progress_color=statistic.color)
            bar.set(min(statistic.value / STAT_MAX_VALUE, 1.0))
            bar.grid(row=row + 1, column=0, columnspan=2, sticky="ew", padx=15, pady=(0, 4))
            self.stat_widgets.extend([title, value, bar])

        total_row = len(statistics) * 2
        total_title = ctk.CTkLabel(self.stats_frame, text="Total",
                                   font=ctk.CTkFont(size=14, weight="bold"), anchor="w")
        total_title.grid(row=total_row, column=0, sticky="w", padx=15, pady=10)
        total_value = ctk.CTkLabel(self.stats_frame, text=str(record.total_statistic),
                                   font=ctk.CTkFont(size=14, weight="bold"), anchor="e")
        total_value.grid(row=total_row, column=1, sticky="e", padx=15, pady=10)
        self.stat_widgets.extend([total_title, total_value])

    def _on_store_changed(self) -> None:
        if not self.dialog.winfo_exists():
            self.controller.store.unsubscribe(self._on_store_changed)
            return
        self._render()
        self.controller.start_next_download(self.record)

    def _center_dialog(self, parent: ctk.CTk) -> None:
        """Center the dialog on the parent window."""
        self.dialog.update_idletasks()  # Ensure geometry is calculated

        parent.update_idletasks()
        x = parent.winfo_x() + (parent.winfo_width() - self.dialog.winfo_width()) // 2
        y = parent.winfo_y() + (parent.winfo_height() - self.dialog.winfo_height()) // 2

        self.dialog.geometry(f"+{x}+{y}")

    def close(self) -> None:
        self.controller.store.unsubscribe(self._on_store_changed)
        self.dialog.destroy()
