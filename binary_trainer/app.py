"""Pygame UI shell for the Binary Trainer.

Menus:
- Free Practice (toggle bits until they match a random target)
- Encoding Drill (timed: decimal -> bits)
- Decoding Drill (timed: bits -> decimal)

Deterministic conversion/session/timing logic lives in binary_trainer/* (core
modules); this module only renders state and maps input onto it.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

import pygame

from . import codec
from .binary_drill import BinaryDrill, BinaryDrillKind, BinaryDrillPayload, build_binary_drill
from .bounded_value import NumberRange
from .challenge import ChallengeSession, Evaluation, start_challenge
from .clock import RealClock
from .cognitive_core import Phase
from .config import TrainerConfig, configure_logging, load_config
from .results import drill_feedback, feedback_message

logger = logging.getLogger(__name__)

WINDOW_SIZE = (960, 540)
TARGET_FPS = 60
TARGET_RESPONSE_S = 8.0
UNDO_LIMIT = 64

BG = (10, 10, 14)
TEXT_MAIN = (235, 235, 245)
TEXT_MUTED = (140, 140, 150)
BIT_ON = (244, 248, 255)
BIT_OFF = (30, 30, 40)
GOOD = (180, 220, 180)
BAD = (220, 180, 180)

_DIGIT_KEYS = {
    pygame.K_1: 0,
    pygame.K_2: 1,
    pygame.K_3: 2,
    pygame.K_4: 3,
    pygame.K_5: 4,
    pygame.K_6: 5,
    pygame.K_7: 6,
    pygame.K_8: 7,
    pygame.K_KP1: 0,
    pygame.K_KP2: 1,
    pygame.K_KP3: 2,
    pygame.K_KP4: 3,
    pygame.K_KP5: 4,
    pygame.K_KP6: 5,
    pygame.K_KP7: 6,
    pygame.K_KP8: 7,
}


class Screen(Protocol):
    def handle_event(self, event: pygame.event.Event) -> None: ...
    def render(self, surface: pygame.Surface) -> None: ...


@dataclass(frozen=True, slots=True)
class MenuItem:
    label: str
    action: Callable[[], None]


class App:
    def __init__(self, surface: pygame.Surface, font: pygame.font.Font) -> None:
        self._surface = surface
        self._font = font
        self._screens: list[Screen] = []
        self._running = True

    @property
    def running(self) -> bool:
        return self._running

    @property
    def font(self) -> pygame.font.Font:
        return self._font

    def push(self, screen: Screen) -> None:
        self._screens.append(screen)

    def pop(self) -> None:
        # Never pop the root screen; it handles its own quit.
        if len(self._screens) > 1:
            self._screens.pop()

    def quit(self) -> None:
        self._running = False

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self.quit()
            return
        if not self._screens:
            return
        self._screens[-1].handle_event(event)

    def render(self) -> None:
        if not self._screens:
            return
        self._screens[-1].render(self._surface)


class MenuScreen:
    def __init__(self, app: App, title: str, items: list[MenuItem], *, is_root: bool = False) -> None:
        self._app = app
        self._title = title
        self._items = items
        self._selected = 0
        self._is_root = is_root
        self._title_font = pygame.font.Font(None, 42)
        self._item_font = pygame.font.Font(None, 32)
        self._hint_font = pygame.font.Font(None, 22)

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        if event.key in (pygame.K_UP, pygame.K_w):
            self._move(-1)
        elif event.key in (pygame.K_DOWN, pygame.K_s):
            self._move(1)
        elif event.key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE):
            if self._items:
                self._items[self._selected].action()
        elif event.key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
            if self._is_root:
                self._app.quit()
            else:
                self._app.pop()

    def _move(self, delta: int) -> None:
        if not self._items:
            return
        self._selected = (self._selected + delta) % len(self._items)

    def render(self, surface: pygame.Surface) -> None:
        w, h = surface.get_size()
        surface.fill((3, 9, 78))

        frame = pygame.Rect(20, 20, max(260, w - 40), max(220, h - 40))
        pygame.draw.rect(surface, (8, 18, 104), frame)
        pygame.draw.rect(surface, (226, 236, 255), frame, 2)

        title = self._title_font.render(self._title, True, (238, 245, 255))
        surface.blit(title, title.get_rect(center=(frame.centerx, frame.y + 36)))

        y = frame.y + 90
        for idx, item in enumerate(self._items):
            row = pygame.Rect(frame.x + 40, y, frame.w - 80, 40)
            selected = idx == self._selected
            pygame.draw.rect(surface, (244, 248, 255) if selected else (9, 20, 106), row)
            pygame.draw.rect(surface, (120, 142, 196) if selected else (62, 84, 152), row, 1)
            color = (14, 26, 74) if selected else (238, 245, 255)
            text = self._item_font.render(item.label, True, color)
            surface.blit(text, (row.x + 10, row.y + (row.h - text.get_height()) // 2))
            y += 48

        footer = "Enter/Space: Select  |  Esc/Backspace: Back"
        foot = self._hint_font.render(footer, True, (186, 200, 224))
        surface.blit(foot, foot.get_rect(midbottom=(frame.centerx, frame.bottom - 10)))


def _draw_bit_row(
    surface: pygame.Surface,
    font: pygame.font.Font,
    label_font: pygame.font.Font,
    *,
    bits: codec.BitVector,
    place_values: tuple[int, ...],
    top: int,
    cursor: int | None = None,
    wrong: tuple[int, ...] = (),
) -> int:
    """Draw one box per bit with its place value beneath. Returns the row bottom."""

    box = 64
    gap = 14
    total = len(bits) * box + (len(bits) - 1) * gap
    x = (surface.get_width() - total) // 2
    for i, bit in enumerate(bits):
        rect = pygame.Rect(x, top, box, box)
        pygame.draw.rect(surface, BIT_ON if bit else BIT_OFF, rect)
        edge = BAD if i in wrong else (90, 90, 110)
        pygame.draw.rect(surface, edge, rect, 2)
        if cursor == i:
            pygame.draw.rect(surface, (255, 210, 80), rect.inflate(8, 8), 3)
        digit = font.render(str(bit), True, BIT_OFF if bit else TEXT_MAIN)
        surface.blit(digit, digit.get_rect(center=rect.center))
        power = label_font.render(str(place_values[i]), True, TEXT_MUTED)
        surface.blit(power, power.get_rect(midtop=(rect.centerx, rect.bottom + 6)))
        x += box + gap
    return top + box + 30


class PracticeScreen:
    """Untimed practice over one :class:`ChallengeSession` at a time."""

    def __init__(self, app: App, *, config: TrainerConfig, rng: random.Random) -> None:
        self._app = app
        self._config = config
        self._rng = rng
        self._cursor_range = NumberRange(0, config.bit_width - 1)
        self._small_font = pygame.font.Font(None, 24)
        self._big_font = pygame.font.Font(None, 52)
        self._new_challenge()

    @property
    def session(self) -> ChallengeSession:
        return self._session

    def _new_challenge(self) -> None:
        cfg = self._config
        self._session = start_challenge(self._rng, cfg.value_range, cfg.bit_width, initial=cfg.initial_bits)
        self._history: list[ChallengeSession] = []
        self._cursor = 0
        self._typed = ""
        self._evaluation: Evaluation | None = None

    def _apply(self, session: ChallengeSession) -> None:
        if session == self._session:
            return
        self._history.append(self._session)
        del self._history[:-UNDO_LIMIT]
        self._session = session
        self._evaluation = None

    def _undo(self) -> None:
        if self._history:
            self._session = self._history.pop()
            self._evaluation = None

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        key = event.key
        if key == pygame.K_ESCAPE:
            self._app.pop()
        elif key == pygame.K_LEFT:
            self._cursor = self._cursor_range.decrement(self._cursor)
        elif key == pygame.K_RIGHT:
            self._cursor = self._cursor_range.increment(self._cursor)
        elif key == pygame.K_SPACE:
            self._apply(self._session.toggle_bit(self._cursor))
        elif key in (pygame.K_UP, pygame.K_PLUS, pygame.K_KP_PLUS, pygame.K_EQUALS):
            self._apply(self._session.increment())
        elif key in (pygame.K_DOWN, pygame.K_MINUS, pygame.K_KP_MINUS):
            self._apply(self._session.decrement())
        elif key == pygame.K_BACKSPACE:
            self._typed = self._typed[:-1]
        elif key in (pygame.K_RETURN, pygame.K_KP_ENTER):
            if self._typed:
                self._apply(self._session.set_text(self._typed))
                self._typed = ""
            else:
                self._evaluation = self._session.evaluate()
        elif key == pygame.K_c:
            self._evaluation = self._session.evaluate()
        elif key == pygame.K_n:
            self._new_challenge()
        elif key == pygame.K_z:
            self._undo()
        elif event.unicode and event.unicode.isdigit() and len(self._typed) < 6:
            self._typed += event.unicode

    def render(self, surface: pygame.Surface) -> None:
        surface.fill(BG)
        s = self._session
        title = self._app.font.render("Free Practice", True, TEXT_MAIN)
        surface.blit(title, (40, 30))
        prompt = self._big_font.render(s.prompt, True, TEXT_MAIN)
        surface.blit(prompt, prompt.get_rect(midtop=(surface.get_width() // 2, 80)))

        wrong = self._evaluation.wrong_bits if self._evaluation is not None else ()
        bottom = _draw_bit_row(
            surface,
            self._app.font,
            self._small_font,
            bits=s.bits,
            place_values=codec.place_values(s.bit_width),
            top=160,
            cursor=self._cursor,
            wrong=wrong,
        )

        up = "^" if s.can_increment() else " "
        down = "v" if s.can_decrement() else " "
        shown = self._typed if self._typed else str(s.current_value)
        field = self._big_font.render(f"= {shown}  {up}{down}", True, TEXT_MAIN)
        surface.blit(field, field.get_rect(midtop=(surface.get_width() // 2, bottom + 10)))

        if self._evaluation is not None:
            ev = self._evaluation
            if ev.is_correct:
                msg, color = "Correct!", GOOD
            else:
                msg, color = f"Not yet: your bits make {ev.current_value}", BAD
            result = self._app.font.render(msg, True, color)
            surface.blit(result, result.get_rect(midtop=(surface.get_width() // 2, bottom + 70)))

        hint = self._small_font.render(
            "Left/Right: move  Space: toggle  Up/Down: +/-1  digits+Enter: set value  "
            "Enter/C: check  Z: undo  N: new  Esc: back",
            True,
            TEXT_MUTED,
        )
        surface.blit(hint, (40, surface.get_height() - 40))


class DrillScreen:
    def __init__(self, app: App, *, engine_factory: Callable[[], BinaryDrill]) -> None:
        self._app = app
        self._engine = engine_factory()
        self._input = ""
        self._cursor = 0
        self._small_font = pygame.font.Font(None, 24)
        self._big_font = pygame.font.Font(None, 52)

    @property
    def engine(self) -> BinaryDrill:
        return self._engine

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        key = event.key

        # Emergency exit works even during the scored block.
        if key == pygame.K_F12 or (key == pygame.K_ESCAPE and (event.mod & pygame.KMOD_SHIFT)):
            self._app.pop()
            return
        if key == pygame.K_ESCAPE:
            if self._engine.can_exit():
                self._app.pop()
            return

        phase = self._engine.phase
        if key in (pygame.K_RETURN, pygame.K_KP_ENTER):
            if phase is Phase.INSTRUCTIONS:
                self._engine.start_practice()
            elif phase is Phase.PRACTICE_DONE:
                self._engine.start_scored()
            elif phase is Phase.RESULTS:
                self._app.pop()
            elif self._engine.submit_answer(self._input):
                self._input = ""
                self._cursor = 0
            return

        if phase not in (Phase.PRACTICE, Phase.SCORED):
            return

        if self._engine.kind is BinaryDrillKind.ENCODE:
            session = self._engine.session
            width = 0 if session is None else session.bit_width
            if key == pygame.K_LEFT:
                self._cursor = max(0, self._cursor - 1)
            elif key == pygame.K_RIGHT:
                self._cursor = min(max(0, width - 1), self._cursor + 1)
            elif key == pygame.K_SPACE:
                self._engine.toggle_bit(self._cursor)
            elif key in _DIGIT_KEYS and _DIGIT_KEYS[key] < width:
                self._engine.toggle_bit(_DIGIT_KEYS[key])
        else:
            if key == pygame.K_BACKSPACE:
                self._input = self._input[:-1]
            elif event.unicode and event.unicode.isdigit() and len(self._input) < 6:
                self._input += event.unicode

    def render(self, surface: pygame.Surface) -> None:
        self._engine.update()
        snap = self._engine.snapshot()

        # If the timer expires mid-entry, auto-submit what was typed so far.
        if (
            snap.phase is Phase.SCORED
            and snap.time_remaining_s is not None
            and snap.time_remaining_s <= 0.0
            and self._input.strip() != ""
        ):
            self._engine.submit_answer(self._input)
            self._input = ""
            self._engine.update()
            snap = self._engine.snapshot()

        surface.fill(BG)
        title = self._app.font.render(snap.title, True, TEXT_MAIN)
        surface.blit(title, (40, 30))

        y_info = 70
        if snap.time_remaining_s is not None:
            rem = int(round(snap.time_remaining_s))
            timer = self._small_font.render(f"Time remaining: {rem // 60:02d}:{rem % 60:02d}", True, (200, 200, 210))
            surface.blit(timer, (40, y_info))
            y_info += 26
        stats = self._small_font.render(f"Scored: {snap.correct_scored}/{snap.attempted_scored}", True, TEXT_MUTED)
        surface.blit(stats, (40, y_info))

        payload = snap.payload if isinstance(snap.payload, BinaryDrillPayload) else None
        if payload is None:
            lines = self._engine.instructions() if snap.phase is Phase.INSTRUCTIONS else []
            lines = lines + str(snap.prompt).split("\n")
            if snap.phase is Phase.RESULTS:
                band = drill_feedback(self._engine, target_rt_s=TARGET_RESPONSE_S)
                lines += ["", feedback_message(band)]
            if snap.practice_feedback:
                lines = [snap.practice_feedback, ""] + lines
            y = 130
            for line in lines[:16]:
                surface.blit(self._small_font.render(line, True, TEXT_MAIN), (40, y))
                y += 24
            return

        prompt = self._big_font.render(snap.prompt, True, TEXT_MAIN)
        surface.blit(prompt, prompt.get_rect(midtop=(surface.get_width() // 2, 120)))
        encode = payload.kind is BinaryDrillKind.ENCODE
        bottom = _draw_bit_row(
            surface,
            self._app.font,
            self._small_font,
            bits=payload.bits,
            place_values=payload.place_values,
            top=190,
            cursor=self._cursor if encode else None,
        )
        if encode:
            line = f"= {payload.current_value}"
        else:
            caret = "|" if (pygame.time.get_ticks() // 500) % 2 == 0 else ""
            line = f"= {self._input}{caret}"
        entry = self._big_font.render(line, True, TEXT_MAIN)
        surface.blit(entry, entry.get_rect(midtop=(surface.get_width() // 2, bottom + 10)))

        if snap.practice_feedback:
            good = snap.practice_feedback.startswith("Correct")
            fb = self._small_font.render(snap.practice_feedback, True, GOOD if good else BAD)
            surface.blit(fb, fb.get_rect(midtop=(surface.get_width() // 2, bottom + 70)))

        hint = self._small_font.render(snap.input_hint, True, TEXT_MUTED)
        surface.blit(hint, (40, surface.get_height() - 40))
        if not self._engine.can_exit():
            lock = self._small_font.render("Drill in progress: cannot exit.", True, TEXT_MUTED)
            surface.blit(lock, (560, surface.get_height() - 40))


def _new_seed() -> int:
    return random.SystemRandom().randint(1, 2**31 - 1)


def run(
    *,
    max_frames: int | None = None,
    event_injector: Callable[[int], None] | None = None,
    config: TrainerConfig | None = None,
) -> int:
    cfg = config or load_config()
    configure_logging(cfg.log_level)

    pygame.init()
    pygame.display.set_caption("Binary Trainer")
    surface = pygame.display.set_mode(WINDOW_SIZE, pygame.RESIZABLE)
    font = pygame.font.Font(None, 36)
    clock = pygame.time.Clock()

    app = App(surface=surface, font=font)
    real_clock = RealClock()

    def open_practice() -> None:
        app.push(PracticeScreen(app, config=cfg, rng=random.Random(_new_seed())))

    def open_drill(kind: BinaryDrillKind) -> None:
        seed = _new_seed()
        logger.info("Opening %s drill with seed %d", kind.value, seed)
        app.push(
            DrillScreen(
                app,
                engine_factory=lambda: build_binary_drill(
                    clock=real_clock,
                    seed=seed,
                    difficulty=cfg.difficulty,
                    config=cfg.drill_config(),
                    kind=kind,
                ),
            )
        )

    main_items = [
        MenuItem("Free Practice", open_practice),
        MenuItem("Encoding Drill", lambda: open_drill(BinaryDrillKind.ENCODE)),
        MenuItem("Decoding Drill", lambda: open_drill(BinaryDrillKind.DECODE)),
        MenuItem("Quit", app.quit),
    ]
    app.push(MenuScreen(app, "Main Menu", main_items, is_root=True))

    frame = 0
    try:
        while app.running:
            if event_injector is not None:
                event_injector(frame)

            for event in pygame.event.get():
                app.handle_event(event)

            app.render()
            pygame.display.flip()

            frame += 1
            if max_frames is not None and frame >= max_frames:
                break

            clock.tick(TARGET_FPS)
    finally:
        pygame.quit()

    return 0
