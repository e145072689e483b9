#!/usr/bin/env python3
"""
JezzBall
========
Balls bounce around a rectangular arena. Click to launch a divider: two
lines grow from the click point, one to the right and one downward. A line
that reaches the edge of the arena becomes a wall. A ball touching a line
while it grows pops it. Sections of the arena that walls cut off from every
ball get filled; fill enough of the arena to clear the level.

Requirements:
    pip install pygame

Run:
    jezzball
    python src/jezzball.py

Controls:
    - Left click: launch a divider at the pointer
    - Press 'R' to restart the level
    - Press 'Q' or Escape to quit
"""

import logging
import sys
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, List, Optional, Sequence, Set, Tuple

import pygame

logger = logging.getLogger("jezzball")

# =============================================================================
# CONFIGURATION
# =============================================================================

# Arena settings
GAME_WIDTH = 800
GAME_HEIGHT = 600
SECTION_SIZE = 100  # Size of the sections that get filled

# Ball settings
BALL_RADIUS = 10
BALL_SPEED = 2  # pixels per tick
INITIAL_BALLS = (  # (x, y, x direction, y direction)
    (100, 100, 1, 1),
    (200, 150, -1, 1),
)

# Line settings
LINE_STEP = 5  # pixels per tick

# Timing
TICK_MS = 10

# Level settings
WIN_FRACTION = 0.75

# Colors (RGB)
BG_COLOR = (0, 0, 0)
GRID_LINE_COLOR = (25, 28, 36)
FILLED_COLOR = (40, 70, 140)
WALL_COLOR = (0, 200, 0)
BALL_COLOR = (220, 50, 50)
RAY_A_COLOR = (255, 0, 0)    # Horizontal line
RAY_B_COLOR = (0, 0, 255)    # Vertical line
PREVIEW_COLOR = (110, 110, 110)
TEXT_COLOR = (240, 240, 240)
ACCENT_COLOR = (100, 180, 255)

Color = Tuple[int, int, int]
Point = Tuple[int, int]
Cell = Tuple[int, int]  # (row, col)


@dataclass(frozen=True)
class GameConfig:
    """Immutable game settings, handed to the simulation at construction."""
    width: int = GAME_WIDTH
    height: int = GAME_HEIGHT
    ball_radius: int = BALL_RADIUS
    ball_speed: int = BALL_SPEED
    section_size: int = SECTION_SIZE
    line_step: int = LINE_STEP
    tick_ms: int = TICK_MS
    initial_balls: Tuple[Tuple[int, int, int, int], ...] = INITIAL_BALLS
    materialize_walls: bool = True
    snap_to_grid: bool = False
    win_fraction: float = WIN_FRACTION

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Reject arena geometry the section grid cannot represent."""
        for name in ('width', 'height', 'ball_radius', 'section_size',
                     'line_step', 'tick_ms'):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        if self.width % self.section_size or self.height % self.section_size:
            raise ValueError(
                f"arena {self.width}x{self.height} is not a whole number of "
                f"{self.section_size}px sections"
            )
        if not 0.0 < self.win_fraction <= 1.0:
            raise ValueError(f"win_fraction must be in (0, 1], got {self.win_fraction}")

    @property
    def cols(self) -> int:
        return self.width // self.section_size

    @property
    def rows(self) -> int:
        return self.height // self.section_size

    @property
    def tick_rate(self) -> int:
        """Ticks per second."""
        return max(1, 1000 // self.tick_ms)


# =============================================================================
# LOGGING
# =============================================================================

def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> None:
    """
    Configures the logger for the 'jezzball' namespace.

    Args:
        level: Logging level (e.g. logging.DEBUG, logging.INFO)
        log_file: Optional path to save logs to a file.
    """
    logger.setLevel(level)

    # Avoid duplicate handlers when the game is restarted in-process
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.info("Logging initialized.")


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass
class Ball:
    """A bouncing ball. Position and velocity are integer pixels."""
    x: int
    y: int
    dx: int
    dy: int
    radius: int = BALL_RADIUS

    def bounds(self) -> pygame.Rect:
        """Bounding box of the ball."""
        return pygame.Rect(
            self.x - self.radius, self.y - self.radius,
            self.radius * 2, self.radius * 2
        )

    def move(self) -> None:
        self.x += self.dx
        self.y += self.dy

    def reverse(self) -> None:
        """Simplified bounce: flip both axes regardless of the face hit."""
        self.dx = -self.dx
        self.dy = -self.dy

    def collides_with(self, rect: pygame.Rect) -> bool:
        return self.bounds().colliderect(rect)


@dataclass(frozen=True)
class Wall:
    """A permanent axis-aligned wall."""
    x: int
    y: int
    width: int
    height: int

    @property
    def rect(self) -> pygame.Rect:
        return pygame.Rect(self.x, self.y, self.width, self.height)


class Orientation(Enum):
    """Growth axis of a ray."""
    HORIZONTAL = "horizontal"  # grows rightward
    VERTICAL = "vertical"      # grows downward

    @property
    def color(self) -> Color:
        return RAY_A_COLOR if self is Orientation.HORIZONTAL else RAY_B_COLOR


@dataclass
class Ray:
    """One growing line of a divider."""
    orientation: Orientation
    x1: int
    y1: int
    x2: int
    y2: int
    stalled: bool = False

    @property
    def horizontal(self) -> bool:
        return self.orientation is Orientation.HORIZONTAL

    @property
    def color(self) -> Color:
        return self.orientation.color

    @property
    def length(self) -> int:
        return (self.x2 - self.x1) if self.horizontal else (self.y2 - self.y1)

    def intersects(self, ball: Ball) -> bool:
        """
        Check whether the ball's center lies in the swept rectangle.
        A ball already behind the growing tip counts as well.
        """
        if self.horizontal:
            return (self.y1 <= ball.y <= self.y2 and
                    self.x1 < ball.x < self.x2)
        return (self.x1 <= ball.x <= self.x2 and
                self.y1 < ball.y < self.y2)

    def bounds(self) -> pygame.Rect:
        """Bounding rectangle, one pixel thick across the growth axis."""
        if self.horizontal:
            return pygame.Rect(self.x1, self.y1, self.x2 - self.x1, 1)
        return pygame.Rect(self.x1, self.y1, 1, self.y2 - self.y1)

    def extend(self, step: int, width: int, height: int) -> None:
        """Grow the endpoint by one step, never past the arena edge."""
        if self.horizontal:
            self.x2 = min(self.x2 + step, width)
        else:
            self.y2 = min(self.y2 + step, height)

    def reached_edge(self, width: int, height: int) -> bool:
        if self.horizontal:
            return self.x2 >= width
        return self.y2 >= height

    def to_wall(self) -> Wall:
        rect = self.bounds()
        return Wall(rect.x, rect.y, rect.width, rect.height)


@dataclass
class Divider:
    """The pair of perpendicular rays launched by one click."""
    x: int
    y: int
    horizontal: Optional[Ray] = None
    vertical: Optional[Ray] = None

    @classmethod
    def at(cls, x: int, y: int) -> 'Divider':
        """Create a divider with both rays anchored at (x, y)."""
        return cls(
            x=x,
            y=y,
            horizontal=Ray(Orientation.HORIZONTAL, x, y, x, y),
            vertical=Ray(Orientation.VERTICAL, x, y, x, y),
        )

    def rays(self) -> Iterator[Ray]:
        """Yield the rays that are still alive."""
        if self.horizontal is not None:
            yield self.horizontal
        if self.vertical is not None:
            yield self.vertical

    def remove(self, ray: Ray) -> None:
        if ray is self.horizontal:
            self.horizontal = None
        elif ray is self.vertical:
            self.vertical = None

    @property
    def is_empty(self) -> bool:
        return self.horizontal is None and self.vertical is None


@dataclass
class Gesture:
    """Pointer state between press and release."""
    active: bool = False
    start: Point = (0, 0)
    current: Point = (0, 0)


class CellState(Enum):
    """State of one section of the arena."""
    EMPTY = "empty"
    FILLED = "filled"


class GameStatus(Enum):
    """Game state enumeration."""
    PLAYING = "playing"
    CLEARED = "cleared"


# =============================================================================
# SECTION GRID
# =============================================================================

class SectionGrid:
    """Tracks which sections of the arena are filled."""

    # 4-directional movement
    DIRECTIONS = [(-1, 0), (1, 0), (0, -1), (0, 1)]

    def __init__(self, cols: int, rows: int, size: int):
        self.cols = cols
        self.rows = rows
        self.size = size
        self.cells: List[List[CellState]] = [
            [CellState.EMPTY for _ in range(cols)] for _ in range(rows)
        ]

    def reset(self) -> None:
        for row in self.cells:
            for col in range(self.cols):
                row[col] = CellState.EMPTY

    def __getitem__(self, cell: Cell) -> CellState:
        row, col = cell
        return self.cells[row][col]

    def cell_at(self, x: int, y: int) -> Cell:
        """Grid cell containing a pixel, clamped into the grid."""
        row = min(max(y // self.size, 0), self.rows - 1)
        col = min(max(x // self.size, 0), self.cols - 1)
        return row, col

    def _cuts(self, walls: Sequence[pygame.Rect]) -> Tuple[List[int], List[int]]:
        """
        Cut lines along every section line and wall edge. The pieces they
        bound each lie inside one section, wholly inside or outside a wall.
        """
        width, height = self.cols * self.size, self.rows * self.size
        xs = {col * self.size for col in range(self.cols + 1)}
        ys = {row * self.size for row in range(self.rows + 1)}
        for rect in walls:
            xs.update(min(max(x, 0), width) for x in (rect.left, rect.right))
            ys.update(min(max(y, 0), height) for y in (rect.top, rect.bottom))
        return sorted(xs), sorted(ys)

    def flood(self, boxes: Sequence[pygame.Rect], walls: Sequence[pygame.Rect]) -> Set[Cell]:
        """
        Multi-source BFS over the free pieces of empty cells, seeded from
        every piece a box overlaps and never crossing a wall.
        Returns every cell with at least one reachable piece.
        """
        xs, ys = self._cuts(walls)

        def piece_rect(i: int, j: int) -> pygame.Rect:
            return pygame.Rect(xs[j], ys[i], xs[j + 1] - xs[j], ys[i + 1] - ys[i])

        free: Set[Tuple[int, int]] = set()
        for i in range(len(ys) - 1):
            for j in range(len(xs) - 1):
                if self[self.cell_at(xs[j], ys[i])] is CellState.FILLED:
                    continue
                if piece_rect(i, j).collidelist(walls) == -1:
                    free.add((i, j))

        visited = {
            piece for piece in free
            if piece_rect(*piece).collidelist(boxes) != -1
        }
        queue: deque = deque(visited)

        while queue:
            i, j = queue.popleft()

            for di, dj in self.DIRECTIONS:
                nxt = (i + di, j + dj)

                if nxt in visited or nxt not in free:
                    continue

                visited.add(nxt)
                queue.append(nxt)

        return {self.cell_at(xs[j], ys[i]) for i, j in visited}

    def recompute(self, balls: Sequence[Ball], walls: Sequence[Wall]) -> int:
        """
        Fill every empty cell no ball can reach any part of.
        Returns the number of newly filled cells.
        """
        rects = [wall.rect for wall in walls]
        reachable = self.flood([ball.bounds() for ball in balls], rects)

        filled = 0
        for row in range(self.rows):
            for col in range(self.cols):
                if self.cells[row][col] is CellState.EMPTY and (row, col) not in reachable:
                    self.cells[row][col] = CellState.FILLED
                    filled += 1
        return filled

    def filled_count(self) -> int:
        return sum(
            1 for row in self.cells for state in row if state is CellState.FILLED
        )

    def filled_fraction(self) -> float:
        return self.filled_count() / (self.rows * self.cols)


# =============================================================================
# SIMULATION
# =============================================================================

class Simulation:
    """Owns and advances all game state, one tick at a time."""

    def __init__(self, config: Optional[GameConfig] = None):
        self.config = config or GameConfig()
        self.balls: List[Ball] = []
        self.walls: List[Wall] = []
        self.divider: Optional[Divider] = None
        self.grid = SectionGrid(
            self.config.cols, self.config.rows, self.config.section_size
        )
        self.status = GameStatus.PLAYING
        self.ticks = 0
        self._regions_dirty = False
        self._spawn_balls()

    def _spawn_balls(self) -> None:
        speed = self.config.ball_speed
        self.balls = [
            Ball(x, y, sx * speed, sy * speed, radius=self.config.ball_radius)
            for x, y, sx, sy in self.config.initial_balls
        ]

    def reset(self) -> None:
        """Restore the starting level."""
        self._spawn_balls()
        self.walls = []
        self.divider = None
        self.grid.reset()
        self.status = GameStatus.PLAYING
        self.ticks = 0
        self._regions_dirty = False
        logger.info("Level reset.")

    # -------------------------------------------------------------------------
    # Dividers
    # -------------------------------------------------------------------------

    def _snap(self, value: int, limit: int) -> int:
        size = self.config.section_size
        return min(max(int(round(value / size)) * size, 0), limit)

    def spawn_divider(self, x: int, y: int) -> Optional[Divider]:
        """
        Launch a divider at (x, y). A divider still growing is replaced
        and its rays are discarded without leaving a wall.
        """
        if self.status is not GameStatus.PLAYING:
            return None

        if self.config.snap_to_grid:
            x = self._snap(x, self.config.width)
            y = self._snap(y, self.config.height)

        if self.divider is not None and not self.divider.is_empty:
            logger.debug("Discarding divider at (%d, %d)", self.divider.x, self.divider.y)

        self.divider = Divider.at(x, y)
        logger.debug("Divider spawned at (%d, %d)", x, y)
        return self.divider

    def _add_wall(self, wall: Wall) -> None:
        self.walls.append(wall)
        self._regions_dirty = True
        logger.info(
            "Wall created at (%d, %d) size %dx%d",
            wall.x, wall.y, wall.width, wall.height
        )

    def grow_rays(self) -> None:
        """Advance every live ray by one step."""
        if self.divider is None:
            return

        width, height = self.config.width, self.config.height

        for ray in list(self.divider.rays()):
            if ray.reached_edge(width, height):
                if not self.config.materialize_walls:
                    continue
                self.divider.remove(ray)
                if ray.length > 0:
                    self._add_wall(ray.to_wall())
                continue

            if ray.stalled:
                continue

            if any(ray.intersects(ball) for ball in self.balls):
                ray.stalled = True
                logger.debug("%s ray stalled by a ball", ray.orientation.value)
                continue

            ray.extend(self.config.line_step, width, height)

        if self.divider.is_empty:
            self.divider = None

    # -------------------------------------------------------------------------
    # Physics
    # -------------------------------------------------------------------------

    def move_balls(self) -> None:
        """Move every ball and resolve its collisions."""
        width, height = self.config.width, self.config.height
        wall_rects = [wall.rect for wall in self.walls]

        for ball in self.balls:
            ball.move()

            # A ball touching a growing line pops it
            if self.divider is not None:
                for ray in list(self.divider.rays()):
                    if ball.collides_with(ray.bounds()):
                        self.divider.remove(ray)
                        logger.debug("%s ray popped", ray.orientation.value)
                if self.divider.is_empty:
                    self.divider = None

            # Once per tick, not once per overlapping wall
            if ball.bounds().collidelist(wall_rects) != -1:
                ball.reverse()

            r = ball.radius
            if ball.x - r <= 0 or ball.x + r >= width:
                ball.dx = -ball.dx
            if ball.y - r <= 0 or ball.y + r >= height:
                ball.dy = -ball.dy
            ball.x = min(max(ball.x, r), width - r)
            ball.y = min(max(ball.y, r), height - r)

    # -------------------------------------------------------------------------
    # Regions
    # -------------------------------------------------------------------------

    def update_regions(self) -> int:
        """Refill the grid after new walls. Returns newly filled cells."""
        if not self._regions_dirty:
            return 0
        self._regions_dirty = False

        filled = self.grid.recompute(self.balls, self.walls)
        fraction = self.grid.filled_fraction()
        if filled:
            logger.info("Filled %d sections (%.0f%% of arena)", filled, fraction * 100)

        if fraction >= self.config.win_fraction:
            self.status = GameStatus.CLEARED
            logger.info("Level cleared at %.0f%% filled", fraction * 100)
        return filled

    def step(self) -> None:
        """Run one tick: grow lines, move balls, refill regions."""
        if self.status is not GameStatus.PLAYING:
            return
        self.grow_rays()
        self.move_balls()
        self.update_regions()
        self.ticks += 1


# =============================================================================
# RENDERER
# =============================================================================

@dataclass(frozen=True)
class Frame:
    """Read-only snapshot of everything drawn in one frame."""
    cells: Tuple[Tuple[Color, ...], ...]
    section_size: int
    walls: Tuple[Tuple[int, int, int, int], ...]
    balls: Tuple[Point, ...]
    ball_radius: int
    rays: Tuple[Tuple[Color, Point, Point], ...]
    preview: Optional[Tuple[Point, Point]] = None
    filled_percent: int = 0
    cleared: bool = False


class Renderer:
    """Handles all game rendering."""

    CELL_COLORS: Dict[CellState, Color] = {
        CellState.EMPTY: BG_COLOR,
        CellState.FILLED: FILLED_COLOR,
    }

    def __init__(self, screen: pygame.Surface):
        self.screen = screen
        self.fonts = self._load_fonts()

    def _load_fonts(self) -> Dict[str, pygame.font.Font]:
        """Load fonts for rendering."""
        pygame.font.init()
        return {
            'title': pygame.font.Font(None, 72),
            'small': pygame.font.Font(None, 22),
        }

    def compose(self, sim: Simulation, gesture: Optional[Gesture] = None) -> Frame:
        """Project the simulation state into a frame."""
        cells = tuple(
            tuple(self.CELL_COLORS[state] for state in row)
            for row in sim.grid.cells
        )
        rays = ()
        if sim.divider is not None:
            rays = tuple(
                (ray.color, (ray.x1, ray.y1), (ray.x2, ray.y2))
                for ray in sim.divider.rays()
            )
        preview = None
        if gesture is not None and gesture.active:
            preview = (gesture.start, gesture.current)

        return Frame(
            cells=cells,
            section_size=sim.grid.size,
            walls=tuple((w.x, w.y, w.width, w.height) for w in sim.walls),
            balls=tuple((b.x, b.y) for b in sim.balls),
            ball_radius=sim.config.ball_radius,
            rays=rays,
            preview=preview,
            filled_percent=int(sim.grid.filled_fraction() * 100),
            cleared=sim.status is GameStatus.CLEARED,
        )

    def draw(self, frame: Frame) -> None:
        """Paint a frame onto the screen."""
        self.screen.fill(BG_COLOR)
        size = frame.section_size

        # Draw the sections
        for row, colors in enumerate(frame.cells):
            for col, color in enumerate(colors):
                rect = pygame.Rect(col * size, row * size, size, size)
                if color != BG_COLOR:
                    pygame.draw.rect(self.screen, color, rect)
                pygame.draw.rect(self.screen, GRID_LINE_COLOR, rect, 1)

        for x, y, w, h in frame.walls:
            pygame.draw.rect(self.screen, WALL_COLOR, pygame.Rect(x, y, w, h))

        for x, y in frame.balls:
            pygame.draw.circle(self.screen, BALL_COLOR, (x, y), frame.ball_radius)

        if frame.preview is not None:
            pygame.draw.line(self.screen, PREVIEW_COLOR, *frame.preview)

        for color, start, end in frame.rays:
            pygame.draw.line(self.screen, color, start, end)

        label = self.fonts['small'].render(
            f"Filled: {frame.filled_percent}%", True, TEXT_COLOR
        )
        self.screen.blit(label, (8, 8))

        if frame.cleared:
            self._draw_cleared()

    def _draw_cleared(self) -> None:
        width, height = self.screen.get_size()
        overlay = pygame.Surface((width, height), pygame.SRCALPHA)
        overlay.fill((0, 0, 0, 160))
        self.screen.blit(overlay, (0, 0))

        title = self.fonts['title'].render("CLEARED", True, ACCENT_COLOR)
        self.screen.blit(title, title.get_rect(center=(width // 2, height // 2 - 20)))

        hint = self.fonts['small'].render("R: Restart    Q: Quit", True, TEXT_COLOR)
        self.screen.blit(hint, hint.get_rect(center=(width // 2, height // 2 + 30)))


# =============================================================================
# INPUT HANDLER
# =============================================================================

class InputHandler:
    """Turns pointer events into divider launches."""

    PRIMARY_BUTTON = 1

    def __init__(self, sim: Simulation):
        self.sim = sim
        self.gesture = Gesture()

    def press(self, pos: Point, button: int) -> None:
        if button != self.PRIMARY_BUTTON:
            return
        x, y = pos
        self.gesture = Gesture(active=True, start=(x, y), current=(x, y))
        self.sim.spawn_divider(x, y)

    def drag(self, pos: Point) -> None:
        if self.gesture.active:
            self.gesture.current = (pos[0], pos[1])

    def release(self, pos: Point, button: int) -> None:
        """End the gesture. Rays already launched keep growing."""
        if self.gesture.active and button == self.PRIMARY_BUTTON:
            self.gesture.active = False

    def dispatch(self, event: pygame.event.Event) -> None:
        """Route a pygame mouse event."""
        if event.type == pygame.MOUSEBUTTONDOWN:
            self.press(event.pos, event.button)
        elif event.type == pygame.MOUSEMOTION:
            self.drag(event.pos)
        elif event.type == pygame.MOUSEBUTTONUP:
            self.release(event.pos, event.button)


# =============================================================================
# GAME CONTROLLER
# =============================================================================

class Game:
    """Main game controller."""

    def __init__(self, config: Optional[GameConfig] = None):
        pygame.init()
        pygame.display.set_caption("JezzBall")

        self.config = config or GameConfig()
        self.screen = pygame.display.set_mode((self.config.width, self.config.height))
        self.clock = pygame.time.Clock()

        self.sim = Simulation(self.config)
        self.renderer = Renderer(self.screen)
        self.input_handler = InputHandler(self.sim)

        self.running = True

    def handle_events(self) -> None:
        """Process all pending events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False

            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_r:
                    self.sim.reset()
                elif event.key in (pygame.K_q, pygame.K_ESCAPE):
                    self.running = False

            else:
                self.input_handler.dispatch(event)

    def update(self) -> None:
        self.sim.step()

    def render(self) -> None:
        frame = self.renderer.compose(self.sim, self.input_handler.gesture)
        self.renderer.draw(frame)
        pygame.display.flip()

    def run(self) -> None:
        """Main game loop."""
        logger.info(
            "Starting %dx%d arena with %d balls",
            self.config.width, self.config.height, len(self.sim.balls)
        )
        while self.running:
            self.handle_events()
            self.update()
            self.render()
            self.clock.tick(self.config.tick_rate)

        pygame.quit()


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

def main():
    """Main entry point."""
    setup_logging()

    print("="*50)
    print("JezzBall")
    print("="*50)
    print("\nControls:")
    print("  - Left click to launch a divider")
    print("  - Press 'R' to restart")
    print("  - Press 'Q' to quit")
    print(f"\nGoal: Fill {int(WIN_FRACTION * 100)}% of the arena!")
    print("="*50)

    game = Game()
    game.run()


if __name__ == "__main__":
    main()
