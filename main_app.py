"""Main Poké Index application window."""

import logging
from tkinter import messagebox
from typing import Dict, List, Optional, Tuple

import customtkinter as ctk

from constants import (
    ITEMS_PER_PAGE, DEFAULT_WINDOW_SIZE, HEADER_HEIGHT, CONTROL_FRAME_HEIGHT,
    PAGINATION_FRAME_HEIGHT, CARD_HEIGHT, COLORS, STORE_REFRESH_DELAY
)
from data_controller import DataController
from database import PokemonDatabase
from dialogs import PokemonDetailDialog
from dispatch import TkDispatcher
from fetcher import HttpFetcher
from managers import SettingsManager
from models import PokemonRecord
from sprites import SpriteManager

logger = logging.getLogger(__name__)

# (record, labels of its card)
Card = Tuple[PokemonRecord, Dict[str, ctk.CTkLabel]]


def page_changed(shown: List[PokemonRecord], current: List[PokemonRecord]) -> bool:
    """Whether the cards must be rebuilt to show current."""
    # Records recreated after a reset share names with the deleted ones
    if not shown or len(shown) != len(current):
        return True
    return any(a is not b for a, b in zip(shown, current))


class PokeIndexApp:
    """Main application class: a searchable, paginated list of Pokémon."""

    def __init__(self, root: ctk.CTk, controller: DataController):
        self.root = root
        self.root.title("Poké Index")
        self.root.geometry(DEFAULT_WINDOW_SIZE)

        self.controller = controller
        self.store = controller.store
        self.sprite_manager = SpriteManager()
        self.current_page = 0
        self.total_pages = 1
        self.search_text = ""
        self.card_widgets: List[Card] = []

        self._refresh_pending: Optional[str] = None
        self._search_pending: Optional[str] = None

        # Pre-create font objects to avoid repeated creation
        self._font_cache = {
            'id_font': ctk.CTkFont(size=14, weight="bold"),
            'name_font': ctk.CTkFont(size=16, weight="bold"),
            'detail_font': ctk.CTkFont(size=13),
        }

        self._setup_ui()
        self.store.subscribe(self._on_store_changed)
        self._update_display()
        self.controller.sync_all_catalog()

    def _setup_ui(self) -> None:
        """Setup the main UI components."""
        ctk.set_appearance_mode("dark")
        ctk.set_default_color_theme("blue")

        self._create_header()
        self._create_controls()
        self._create_pagination_controls()
        self._create_main_area()

    def _create_header(self) -> None:
        """Create the application header."""
        header_frame = ctk.CTkFrame(self.root, height=HEADER_HEIGHT, corner_radius=10)
        header_frame.pack(fill="x", padx=20, pady=10)
        header_frame.pack_propagate(False)

        self.title_label = ctk.CTkLabel(
            header_frame,
            text="Poké Index",
            font=ctk.CTkFont(size=28, weight="bold")
        )
        self.title_label.pack(pady=20)

    def _create_controls(self) -> None:
        """Create search entry, refresh button and status label."""
        controls_frame = ctk.CTkFrame(self.root, height=CONTROL_FRAME_HEIGHT, corner_radius=10)
        controls_frame.pack(fill="x", padx=20, pady=5)
        controls_frame.pack_propagate(False)

        self.search_entry = ctk.CTkEntry(controls_frame, width=260, placeholder_text="Name or Number")
        self.search_entry.pack(side="left", padx=20, pady=12)
        self.search_entry.bind("<KeyRelease>", lambda e: self._on_search_change())

        ctk.CTkButton(
            controls_frame,
            text="⟳ Refresh All",
            command=self.refresh_all,
            fg_color=COLORS["refresh"][0],
            hover_color=COLORS["refresh"][1],
            width=150,
            height=35
        ).pack(side="left", padx=8, pady=12)

        self.status_label = ctk.CTkLabel(
            controls_frame,
            text="",
            font=ctk.CTkFont(size=14, weight="bold")
        )
        self.status_label.pack(side="right", padx=20, pady=15)

    def _create_pagination_controls(self) -> None:
        """Create pagination controls."""
        pagination_frame = ctk.CTkFrame(self.root, height=PAGINATION_FRAME_HEIGHT, corner_radius=10)
        pagination_frame.pack(fill="x", padx=20, pady=5)
        pagination_frame.pack_propagate(False)

        self.prev_button = ctk.CTkButton(
            pagination_frame,
            text="◄ Previous",
            command=self._prev_page,
            width=120,
            height=30
        )
        self.prev_button.pack(side="left", padx=20, pady=10)

        self.page_info_label = ctk.CTkLabel(
            pagination_frame,
            text="Page 1 of 1",
            font=ctk.CTkFont(size=14, weight="bold")
        )
        self.page_info_label.pack(side="left", expand=True)

        self.next_button = ctk.CTkButton(
            pagination_frame,
            text="Next ►",
            command=self._next_page,
            width=120,
            height=30
        )
        self.next_button.pack(side="right", padx=20, pady=10)

    def _create_main_area(self) -> None:
        """Create the main scrollable area for Pokémon cards."""
        main_frame = ctk.CTkFrame(self.root, corner_radius=10)
        main_frame.pack(fill="both", expand=True, padx=20, pady=10)

        self.main_scrollable = ctk.CTkScrollableFrame(main_frame, corner_radius=10)
        self.main_scrollable.pack(fill="both", expand=True, padx=10, pady=10)
        self.main_scrollable.grid_columnconfigure(0, weight=1)

    def _reset_scroll_position(self) -> None:
        """Scroll back to the top of the list."""
        canvas = getattr(self.main_scrollable, "_parent_canvas", None)
        if canvas is not None:
            canvas.yview_moveto(0.0)

    # ---- Data helpers ----
    def _get_filtered_pokemon(self) -> List[PokemonRecord]:
        return self.store.search(self.search_text)

    def _get_current_page_pokemon(self) -> List[PokemonRecord]:
        """Get Pokémon for the current page."""
        filtered = self._get_filtered_pokemon()
        start_idx = self.current_page * ITEMS_PER_PAGE
        return filtered[start_idx:start_idx + ITEMS_PER_PAGE]

    # ---- Display ----
    def _update_display(self) -> None:
        """Rebuild the cards for the current page."""
        for widget in self.main_scrollable.winfo_children():
            widget.destroy()
        self.card_widgets.clear()

        filtered = self._get_filtered_pokemon()
        self.total_pages = max(1, (len(filtered) + ITEMS_PER_PAGE - 1) // ITEMS_PER_PAGE)
        self.current_page = max(0, min(self.current_page, self.total_pages - 1))

        current_pokemon = self._get_current_page_pokemon()
        if not current_pokemon:
            self._show_empty_state()
        for row, record in enumerate(current_pokemon):
            self.card_widgets.append(self._create_pokemon_card(record, row))

        self.root.after(10, self._reset_scroll_position)
        self._update_pagination_controls()
        self._update_status()
        self._start_downloads()

    def _show_empty_state(self) -> None:
        if self.search_text:
            text = f"No Pokémon matching '{self.search_text}'"
        elif self.controller.settings.have_downloaded_all_pages:
            text = "No Pokémon"
        else:
            text = "🔄 Loading Pokémon..."
        ctk.CTkLabel(
            self.main_scrollable,
            text=text,
            font=ctk.CTkFont(size=18, weight="bold")
        ).grid(row=0, column=0, pady=50)

    def _create_pokemon_card(self, record: PokemonRecord, row: int) -> Card:
        """Create a Pokémon card widget."""
        card_frame = ctk.CTkFrame(
            self.main_scrollable,
            height=CARD_HEIGHT,
            corner_radius=10,
            fg_color=COLORS["card_default"]
        )
        card_frame.grid(row=row, column=0, sticky="ew", padx=10, pady=5)
        card_frame.grid_propagate(False)
        card_frame.grid_columnconfigure(2, weight=1)

        sprite_label = ctk.CTkLabel(card_frame, text="", width=80)
        sprite_label.grid(row=0, column=0, rowspan=2, padx=10, pady=13)

        name_label = ctk.CTkLabel(card_frame, font=self._font_cache['name_font'], anchor="w")
        name_label.grid(row=0, column=1, columnspan=2, sticky="ew", padx=10, pady=(16, 0))

        details_label = ctk.CTkLabel(card_frame, font=self._font_cache['detail_font'], anchor="w")
        details_label.grid(row=1, column=1, columnspan=2, sticky="ew", padx=10, pady=(0, 16))

        number_label = ctk.CTkLabel(
            card_frame,
            font=self._font_cache['id_font'],
            text_color=COLORS["secondary_text"],
            width=80
        )
        number_label.grid(row=0, column=3, padx=15, pady=(16, 0))

        types_label = ctk.CTkLabel(card_frame, font=self._font_cache['detail_font'], width=140)
        types_label.grid(row=1, column=3, padx=15, pady=(0, 16))

        labels = {
            "sprite": sprite_label,
            "name": name_label,
            "details": details_label,
            "number": number_label,
            "types": types_label,
        }
        for widget in (card_frame, *labels.values()):
            widget.bind("<Button-1>", lambda e, r=record: self._open_detail(r))

        card = (record, labels)
        self._update_card(card)
        return card

    def _update_card(self, card: Card) -> None:
        """Show the current state of a card's record."""
        record, labels = card
        labels["sprite"].configure(image=self.sprite_manager.get_sprite(record))
        labels["name"].configure(text=record.display_name)
        if record.weight > 0 and record.height > 0:
            details = f"{record.weight_description}, {record.height_description}"
        else:
            details = "Unknown weight and height"
        labels["details"].configure(text=details)
        labels["number"].configure(text=f"#{record.number}" if record.number > 0 else "")
        types = record.sorted_types
        labels["types"].configure(
            text=" / ".join(t.kind.label for t in types),
            text_color=types[0].kind.color if types else COLORS["secondary_text"]
        )

    def _start_downloads(self) -> None:
        """Ask for whatever the visible Pokémon still lack."""
        for record, _ in self.card_widgets:
            self.controller.start_next_download(record)

    def _update_pagination_controls(self) -> None:
        """Update pagination control states."""
        self.page_info_label.configure(text=f"Page {self.current_page + 1} of {self.total_pages}")
        self.prev_button.configure(state="normal" if self.current_page > 0 else "disabled")
        self.next_button.configure(state="normal" if self.current_page < self.total_pages - 1 else "disabled")

    def _update_status(self) -> None:
        """Update the record count display."""
        text = f"{len(self.store)} Pokémon"
        if not self.controller.settings.have_downloaded_all_pages:
            text += " (downloading...)"
        self.status_label.configure(text=text)

    # ---- Store notifications ----
    def _on_store_changed(self) -> None:
        """Debounce store saves into one refresh."""
        if self._refresh_pending is None:
            self._refresh_pending = self.root.after(STORE_REFRESH_DELAY, self._refresh_from_store)

    def _refresh_from_store(self) -> None:
        self._refresh_pending = None
        shown = [record for record, _ in self.card_widgets]
        if page_changed(shown, self._get_current_page_pokemon()):
            self._update_display()
            return
        # Same Pokémon on the page: update cards in place
        for card in self.card_widgets:
            self._update_card(card)
        self._update_status()
        self._start_downloads()

    # ---- Event handlers ----
    def _open_detail(self, record: PokemonRecord) -> None:
        PokemonDetailDialog(self.root, record, self.sprite_manager, self.controller)

    def _on_search_change(self) -> None:
        """Handle search text change with debouncing."""
        if self._search_pending:
            self.root.after_cancel(self._search_pending)
        self._search_pending = self.root.after(200, self._execute_search)

    def _execute_search(self) -> None:
        self._search_pending = None
        text = self.search_entry.get().strip()
        if text == self.search_text:
            return
        self.search_text = text
        self.current_page = 0
        self._update_display()

    def focus_search(self) -> None:
        self.search_entry.focus()

    def refresh_all(self) -> None:
        """Delete all Pokémon and download them again."""
        if not messagebox.askyesno("Refresh All", "Delete all Pokémon and download them again?"):
            return
        if not self.controller.reset_all():
            messagebox.showerror("Refresh Failed", "Could not delete the stored Pokémon. See the log for details.")
            return
        self.sprite_manager.clear_cache()
        self.current_page = 0
        self.controller.sync_all_catalog()

    def _prev_page(self) -> None:
        """Go to previous page."""
        if self.current_page > 0:
            self.current_page -= 1
            self._update_display()

    def _next_page(self) -> None:
        """Go to next page."""
        if self.current_page < self.total_pages - 1:
            self.current_page += 1
            self._update_display()


def run_app(store: PokemonDatabase, settings: SettingsManager, fetcher: HttpFetcher,
            reset: bool = False) -> None:
    """Create the window and run the Tk main loop until it is closed."""
    root = ctk.CTk()
    controller = DataController(store, settings, fetcher, TkDispatcher(root))
    if reset and not controller.reset_all():
        logger.error("Reset failed, showing the stored Pokémon")

    app = PokeIndexApp(root, controller)

    # Bind keyboard shortcuts
    root.bind('<Control-f>', lambda e: app.focus_search())
    root.bind('<Control-r>', lambda e: app.refresh_all())

    root.mainloop()
