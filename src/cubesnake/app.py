"""
app.py

Thin pygame front end for the simulation core: captures keyboard input as
heading intents, feeds the controller a game clock every frame, forwards the
resulting events to the score collaborator and draws the board top-down
through the board's anchor mapping.
"""

import sys
import math
import logging
from typing import Dict, List, Optional, Tuple
from dataclasses import dataclass
from enum import Enum, auto

import pygame

from cubesnake.config import CAMPAIGN_LEVELS, Direction, GameConfig, GameMode, GameStatus, ModeConfig
from cubesnake.debug import render_board_text, save_board_snapshot
from cubesnake.game import ApplePickedUp, SimulationController
from cubesnake.registries import BarrierKind, ObstacleKind
from cubesnake.resources import ResourceManager, setup_logging
from cubesnake.scores import CampaignProgress, ScoreManager

logger = logging.getLogger(__name__)

##########################
# INPUT
##########################

class AppState(Enum):
    """Screens of the front end"""
    MENU = auto()
    PLAY = auto()
    GAME_OVER = auto()
    HIGHSCORES = auto()


KEY_DIRECTIONS: Dict[int, Direction] = {
    pygame.K_UP: Direction.UP,
    pygame.K_w: Direction.UP,
    pygame.K_KP8: Direction.UP,
    pygame.K_DOWN: Direction.DOWN,
    pygame.K_s: Direction.DOWN,
    pygame.K_KP2: Direction.DOWN,
    pygame.K_LEFT: Direction.LEFT,
    pygame.K_a: Direction.LEFT,
    pygame.K_KP4: Direction.LEFT,
    pygame.K_RIGHT: Direction.RIGHT,
    pygame.K_d: Direction.RIGHT,
    pygame.K_KP6: Direction.RIGHT,
}

MENU_MODES: Dict[int, GameMode] = {
    pygame.K_1: GameMode.CLASSIC,
    pygame.K_2: GameMode.BARRIERS,
    pygame.K_3: GameMode.OBSTACLES,
    pygame.K_4: GameMode.RANDOM_BARRIERS,
    pygame.K_5: GameMode.CAMPAIGN,
}


def direction_for_key(key: int) -> Optional[Direction]:
    """Heading intent for a key press, None for keys that do not steer"""
    return KEY_DIRECTIONS.get(key)


def game_over_title(status: GameStatus, campaign_cleared: bool = False) -> str:
    if campaign_cleared:
        return f"CAMPAIGN COMPLETE! ({len(CAMPAIGN_LEVELS)} levels)"
    return "GAME OVER!" if status is GameStatus.TERMINATED else "VICTORY!"

##########################
# RENDERING
##########################

@dataclass
class SegmentSprite:
    """Visual object paired with one snake cell"""
    index: int


class Renderer:
    """
    Draws a read-only view of the game state.
    Maps cells to screen pixels via Board.cell_to_anchor.
    """
    def __init__(self, config: GameConfig):
        self.config = config
        self._font_cache: Dict[int, pygame.font.Font] = {}

    def get_font(self, size: int) -> pygame.font.Font:
        """Get or create a font of the specified size"""
        if size not in self._font_cache:
            self._font_cache[size] = pygame.font.Font(None, size)
        return self._font_cache[size]

    def layout(self, surface: pygame.Surface, board) -> Tuple[float, int, int]:
        """Scale (pixels per anchor unit) and top-left offset of the board"""
        w, h = surface.get_size()
        extent = board.size * board.cell_span
        scale = min(w, h) / (extent + 2 * board.cell_span)
        offset_x = int((w - extent * scale) / 2)
        offset_y = int((h - extent * scale) / 2)
        return scale, offset_x, offset_y

    def to_screen(self, anchor: Tuple[float, float], layout) -> Tuple[int, int]:
        scale, offset_x, offset_y = layout
        return int(offset_x + anchor[0] * scale), int(offset_y + anchor[1] * scale)

    def draw_text(self, surface: pygame.Surface, text: str, x: int, y: int,
                  size: int = 24, color: Tuple[int, ...] = None, center: bool = False) -> None:
        """Draw text with a drop shadow"""
        if color is None:
            color = self.config.WHITE
        font = self.get_font(size)
        for rendered, offset in ((font.render(text, True, self.config.BLACK), 2),
                                 (font.render(text, True, color), 0)):
            rect = rendered.get_rect()
            if center:
                rect.center = (x + offset, y + offset)
            else:
                rect.topleft = (x + offset, y + offset)
            surface.blit(rendered, rect)

    def draw_cell(self, surface, board, cell, color, layout, shrink: float = 0.9) -> None:
        scale = layout[0]
        cx, cy = self.to_screen(board.cell_to_anchor(cell), layout)
        half = max(int(board.cell_span * scale * shrink / 2), 1)
        pygame.draw.rect(surface, color, pygame.Rect(cx - half, cy - half, half * 2, half * 2))

    def draw_state(self, surface: pygame.Surface, state, segments: List[SegmentSprite],
                   frame_count: int, now: int) -> None:
        board = state.board
        layout = self.layout(surface, board)
        scale = layout[0]

        # Floor
        top_left = self.to_screen((0, 0), layout)
        side = int(board.size * board.cell_span * scale)
        pygame.draw.rect(surface, self.config.FLOOR, pygame.Rect(top_left[0], top_left[1], side, side))

        for barrier in state.barriers:
            color = self.config.WALL if barrier.kind is BarrierKind.BOUNDARY else self.config.GRAY
            for cell in barrier.cells:
                self.draw_cell(surface, board, cell, color, layout)

        for obstacle in state.obstacles:
            fade = state.obstacles.fade_progress(obstacle, now)
            base = self.config.TREE if obstacle.kind is ObstacleKind.TREE else self.config.ROCK
            color = tuple(int(c * (1 - fade) + f * fade) for c, f in zip(base, self.config.FLOOR))
            radius = max(int(board.cell_span * scale * 0.45), 2)
            pygame.draw.circle(surface, color, self.to_screen(obstacle.anchor, layout), radius)

        if state.apple is not None:
            pulse = abs(math.sin(frame_count * 0.1)) * 0.2 + 0.8
            radius = max(int(board.cell_span * scale * 0.45 * pulse), 2)
            pygame.draw.circle(surface, self.config.RED,
                               self.to_screen(board.cell_to_anchor(state.apple), layout), radius)

        cells = state.snake.cells
        for sprite in segments[:len(cells)]:
            cell = cells[sprite.index]
            color = self.config.HEAD if sprite.index == 0 else self.config.GREEN
            self.draw_cell(surface, board, cell, color, layout, shrink=0.95 if sprite.index == 0 else 0.85)

##########################
# MAIN GAME
##########################

class App:
    def __init__(self):
        """Initialize pygame, the core and its collaborators"""
        pygame.init()

        self.config = GameConfig()
        self.resources = ResourceManager()
        setup_logging(self.resources)

        self.score_manager = ScoreManager(self.config, self.resources)
        self.campaign = CampaignProgress(self.resources)
        self.controller = SimulationController(self.config)
        self.renderer = Renderer(self.config)
        self.segments: List[SegmentSprite] = []
        self.controller.attach_visuals(self.segments)

        self.screen = pygame.display.set_mode((800, 800), pygame.RESIZABLE)
        pygame.display.set_caption("CubeSnake")
        self.clock = pygame.time.Clock()
        self.state = AppState.MENU
        self.mode = GameMode.CLASSIC
        self.frame_count = 0
        self.player_name = ""
        self.final_score = 0

    def start_round(self, mode: GameMode, keep_score: bool = False) -> None:
        """
        Reset the core for a mode. Campaign rounds use the saved level, and a
        finished campaign starts over from level 1. keep_score carries the
        running score into the next campaign level.
        """
        self.mode = mode
        level = None
        if mode is GameMode.CAMPAIGN:
            level = self.campaign.start().level
        mode_config = ModeConfig.for_mode(mode, self.config, level)
        self.controller.reset(mode_config, pygame.time.get_ticks())
        self.segments[:] = [SegmentSprite(i) for i in range(len(self.controller.state.snake))]
        if not keep_score:
            self.score_manager.reset()
        if mode is GameMode.CAMPAIGN:
            logger.info(f"Campaign level {self.campaign.level}: {self.campaign.info.name}")
        self.state = AppState.PLAY

    def run(self) -> None:
        """Main loop; renders every frame, the controller decides when to tick"""
        while True:
            self.clock.tick(self.config.FPS)
            self.frame_count += 1

            events = pygame.event.get()
            for event in events:
                if event.type == pygame.QUIT:
                    self.cleanup()
                    return
                elif event.type == pygame.VIDEORESIZE:
                    self.screen = pygame.display.set_mode((event.w, event.h), pygame.RESIZABLE)

            if self.state == AppState.MENU:
                self.update_menu(events)
            elif self.state == AppState.PLAY:
                self.update_game(events)
            elif self.state == AppState.GAME_OVER:
                self.update_game_over(events)
            elif self.state == AppState.HIGHSCORES:
                self.update_highscores(events)

            pygame.display.flip()

    def update_menu(self, events: List[pygame.event.Event]) -> None:
        for event in events:
            if event.type == pygame.KEYDOWN:
                if event.key in MENU_MODES:
                    self.start_round(MENU_MODES[event.key])
                elif event.key == pygame.K_h:
                    self.state = AppState.HIGHSCORES
                elif event.key == pygame.K_ESCAPE:
                    self.cleanup()
                    sys.exit()

        w, h = self.screen.get_size()
        self.screen.fill(self.config.BLACK)
        self.renderer.draw_text(self.screen, "CUBE SNAKE", w // 2, h // 2 - 120, size=56, center=True)
        campaign = "new run" if self.campaign.finished else f"level {self.campaign.level}"
        lines = ["[1] Classic", "[2] Barriers", "[3] Obstacles", "[4] Maze",
                 f"[5] Campaign ({campaign})", "[H] Highscores", "[ESC] Quit"]
        for i, line in enumerate(lines):
            self.renderer.draw_text(self.screen, line, w // 2, h // 2 - 50 + i * 36, size=30, center=True)

    def update_game(self, events: List[pygame.event.Event]) -> None:
        for event in events:
            if event.type != pygame.KEYDOWN:
                continue
            direction = direction_for_key(event.key)
            if direction is not None:
                self.controller.request_heading(direction)
            elif event.key in (pygame.K_SPACE, pygame.K_p):
                self.controller.toggle_pause()
            elif event.key == pygame.K_r:
                self.start_round(self.mode)
            elif event.key in (pygame.K_b, pygame.K_F3):
                self.dump_debug()
            elif event.key == pygame.K_ESCAPE:
                self.state = AppState.MENU
                return

        now = pygame.time.get_ticks()
        game_events = self.controller.update(now)
        self.score_manager.handle_events(game_events, self.mode)
        for event in game_events:
            if isinstance(event, ApplePickedUp):
                if event.grew:
                    self.segments.append(SegmentSprite(len(self.segments)))
                if self.mode is GameMode.CAMPAIGN and self.campaign.record_apple():
                    self.finish_campaign_level()
                    return

        state = self.controller.state
        self.screen.fill(self.config.BLACK)
        self.renderer.draw_state(self.screen, state, self.segments, self.frame_count, now)
        self.renderer.draw_text(self.screen, f"Score: {self.score_manager.score}", 10, 10)
        self.renderer.draw_text(self.screen, f"Best: {self.score_manager.best(self.mode)}", 10, 36)
        if self.mode is GameMode.CAMPAIGN:
            info = self.campaign.info
            self.renderer.draw_text(self.screen, f"Level {info.level}: {info.name} "
                                    f"({self.campaign.apples}/{info.target_apples})", 10, 62)
        if self.controller.paused:
            w, h = self.screen.get_size()
            self.renderer.draw_text(self.screen, "PAUSED", w // 2, h // 2, size=48, center=True)

        if state.status is not GameStatus.ALIVE:
            self.final_score = self.score_manager.score
            self.state = AppState.GAME_OVER
            logger.info(f"Round over ({state.status.value}). Score: {self.final_score}, Mode: {self.mode.value}")

    def finish_campaign_level(self) -> None:
        if self.campaign.next_level() is None:
            self.final_score = self.score_manager.score
            self.state = AppState.GAME_OVER
            return
        self.start_round(GameMode.CAMPAIGN, keep_score=True)

    def dump_debug(self) -> None:
        """Log the board as text and write a PNG snapshot next to the log file"""
        state = self.controller.state
        logger.debug("\n" + render_board_text(state))
        path = self.resources.get_log_path(f"board_{state.ticks:06d}.png")
        save_board_snapshot(state, path, config=self.config)

    def update_game_over(self, events: List[pygame.event.Event]) -> None:
        """Handle game over state updates with name entry"""
        for event in events:
            if event.type == pygame.KEYDOWN:
                if event.key == pygame.K_RETURN:
                    final_name = self.player_name.strip() or "Player"
                    self.score_manager.add_score(final_name, self.final_score, self.mode)
                    logger.info(f"High score added: {final_name} - {self.final_score} in {self.mode.value} mode.")
                    self.player_name = ""
                    self.state = AppState.MENU
                elif event.key == pygame.K_ESCAPE:
                    self.player_name = ""
                    self.state = AppState.MENU
                elif event.key == pygame.K_BACKSPACE:
                    self.player_name = self.player_name[:-1]
                elif len(self.player_name) < 15 and event.unicode.isprintable():
                    self.player_name += event.unicode

        w, h = self.screen.get_size()
        cleared = self.mode is GameMode.CAMPAIGN and self.campaign.cleared
        title = game_over_title(self.controller.state.status, cleared)
        self.screen.fill(self.config.BLACK)
        self.renderer.draw_text(self.screen, title, w // 2, h // 2 - 80, size=40,
                                color=self.config.RED, center=True)
        self.renderer.draw_text(self.screen, f"Score: {self.final_score}", w // 2, h // 2 - 40,
                                size=30, center=True)
        self.renderer.draw_text(self.screen, "Enter your name:", w // 2, h // 2, center=True)
        self.renderer.draw_text(self.screen, self.player_name, w // 2, h // 2 + 30,
                                color=self.config.YELLOW, center=True)
        self.renderer.draw_text(self.screen, "[ENTER] Submit | [ESC] Menu", w // 2, h // 2 + 70,
                                size=20, center=True)

    def update_highscores(self, events: List[pygame.event.Event]) -> None:
        for event in events:
            if event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                self.state = AppState.MENU
                return

        w, h = self.screen.get_size()
        self.screen.fill(self.config.BLACK)
        self.renderer.draw_text(self.screen, "HIGH SCORES", w // 2, 40, size=40, center=True)
        y_offset = 90
        for mode in GameMode:
            self.renderer.draw_text(self.screen, f"{mode.value}:", w // 2, y_offset, size=28, center=True)
            y_offset += 30
            for i, entry in enumerate(self.score_manager.highscores.get(mode.value, [])):
                self.renderer.draw_text(self.screen, f"{i + 1}. {entry['name']} - {entry['score']}",
                                        w // 2, y_offset, size=22, center=True)
                y_offset += 24
            y_offset += 10
        self.renderer.draw_text(self.screen, "[ESC] Return to Menu", w // 2, h - 30, center=True)

    def cleanup(self) -> None:
        """Clean up resources before exit"""
        pygame.quit()
        logging.info("----- Game cleanup completed -----")

##########################
# MAIN ENTRY POINT
##########################

def main():
    """
    Main entry point for the game.
    Initializes and runs the app instance.
    """
    try:
        app = App()
        app.run()
    except Exception as e:
        logging.error(f"Unexpected error: {e}", exc_info=True)
        pygame.quit()
        sys.exit(1)


if __name__ == "__main__":
    main()
