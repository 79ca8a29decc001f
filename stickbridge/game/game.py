# stickbridge/game/game.py
import sys, argparse
import pygame
from pygame import K_SPACE, K_ESCAPE, K_RETURN, K_r, K_m
from .config import (
    WIDTH, HEIGHT, FPS, GROUND_Y, LEVELS, SEED_DEFAULT,
    COLOR_SKY, COLOR_CLOUD, COLOR_GROUND, COLOR_PLAT, COLOR_PLAT_TOP,
    COLOR_STICK, COLOR_BODY, COLOR_HEAD, COLOR_FG, COLOR_PANEL, COLOR_ACCENT,
)
from .sim import StickSim, GameState, Cue
from .audio import AudioCues

LEVEL_KEYS = {getattr(pygame, f"K_{i + 1}"): i for i in range(len(LEVELS))}


def parse_args():
    p = argparse.ArgumentParser()
    p.add_argument("--seed", type=int, default=None,
                   help="Level seed. Omit for SEED_DEFAULT, use -1 for a new layout every start.")
    p.add_argument("--level", type=int, default=1,
                   help=f"Preselected level (1..{len(LEVELS)}).")
    return p.parse_args()


def draw_background(screen, camera_x):
    screen.fill(COLOR_SKY)
    for i in range(6):
        x = ((i * 230 - camera_x * 0.25) % (WIDTH + 220)) - 100
        y = 70 + (i % 3) * 30
        pygame.draw.ellipse(screen, COLOR_CLOUD, (int(x) - 56, y - 18, 112, 36))
    pygame.draw.rect(screen, COLOR_GROUND, (0, GROUND_Y, WIDTH, HEIGHT - GROUND_Y))


def draw_stick(screen, stick, camera_x):
    if stick.length <= 0:
        return
    tx, ty = stick.tip()
    pygame.draw.line(screen, COLOR_STICK,
                     (int(stick.x - camera_x), int(stick.ground_y)),
                     (int(tx - camera_x), int(ty)), 6)


def draw_player(screen, player, camera_x):
    body = player.rect.move(-int(camera_x), 0)
    pygame.draw.rect(screen, COLOR_BODY, body)
    hx, hy = player.head_center
    pygame.draw.circle(screen, COLOR_HEAD, (hx - int(camera_x), hy), player.head_radius)
    pygame.draw.line(screen, COLOR_BODY, (body.left + 2, body.top + 12),
                     (body.right - 2, body.top + 12), 2)


def draw_panel(screen, font, lines):
    h = 28 * len(lines) + 24
    panel = pygame.Rect((WIDTH - 420) // 2, (HEIGHT - h) // 2, 420, h)
    pygame.draw.rect(screen, COLOR_PANEL, panel, border_radius=10)
    pygame.draw.rect(screen, COLOR_ACCENT, panel, width=2, border_radius=10)
    for i, msg in enumerate(lines):
        txt = font.render(msg, True, COLOR_FG)
        screen.blit(txt, (panel.centerx - txt.get_width() // 2, panel.top + 14 + 28 * i))


def run():
    args = parse_args()

    # Resolve seed: None -> use SEED_DEFAULT; -1 -> random per level start
    if args.seed is None:
        sim_seed = SEED_DEFAULT
    elif args.seed == -1:
        sim_seed = None
    else:
        sim_seed = args.seed

    pygame.init()
    pygame.display.set_caption("Stick Bridge")
    screen = pygame.display.set_mode((WIDTH, HEIGHT))
    clock = pygame.time.Clock()
    font = pygame.font.SysFont("jetbrainsmono", 18)

    sim = StickSim(seed=sim_seed)
    sim.select_level(max(0, min(args.level - 1, len(LEVELS) - 1)))
    audio = AudioCues()
    last_cue = ""

    def start(level_index=None):
        sim.start_game(level_index)
        audio.music.start()
        print(f"start level={sim.current_level + 1} seed={sim.level.seed}")

    while True:
        # the sim clamps dt itself; no catch-up after a stall
        dt = clock.tick(FPS) / 1000.0

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                pygame.quit(); sys.exit()
            if event.type == pygame.KEYDOWN:
                if event.key == K_ESCAPE:
                    if sim.state is GameState.MENU:
                        pygame.quit(); sys.exit()
                    sim.to_menu()
                elif event.key == K_m:
                    enabled = audio.music.toggle()
                    print(f"music {'on' if enabled else 'off'}")
                elif sim.state is GameState.PLAYING and event.key == K_SPACE:
                    sim.begin_grow()
                elif sim.state is GameState.MENU:
                    if event.key in LEVEL_KEYS:
                        sim.select_level(LEVEL_KEYS[event.key])
                    elif event.key in (K_RETURN, K_SPACE):
                        start()
                elif sim.state is GameState.GAMEOVER and event.key == K_r:
                    sim.restart()
                    audio.music.start()
            if event.type == pygame.KEYUP and event.key == K_SPACE:
                sim.release_grow()
            if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                sim.begin_grow()
            if event.type == pygame.MOUSEBUTTONUP and event.button == 1:
                sim.release_grow()
            if event.type == pygame.WINDOWLEAVE:
                sim.release_grow()

        sim.update(dt)
        events = sim.drain_events()
        for ev in events:
            if ev.kind is not Cue.GROW:
                last_cue = ev.kind.value
            if ev.kind is Cue.GAME_OVER:
                audio.music.stop()
                print(f"game over level={sim.current_level + 1} score={ev.score} seed={sim.level.seed}")
        audio.consume(events)
        audio.tick(dt)

        # --- Render ---
        draw_background(screen, sim.camera_x)
        sim.level.draw(screen, sim.camera_x, GROUND_Y, COLOR_PLAT, COLOR_PLAT_TOP)
        if sim.state is GameState.PLAYING:
            draw_stick(screen, sim.stick, sim.camera_x)
            draw_player(screen, sim.player, sim.camera_x)

        hud = f"Level: {sim.current_level + 1}   Score: {sim.score}   Seed: {sim.level.seed}   {last_cue}"
        screen.blit(font.render(hud, True, COLOR_FG), (12, 10))
        screen.blit(font.render("hold SPACE / mouse to grow | M music | ESC menu",
                                True, COLOR_PANEL), (12, 32))

        if sim.state is GameState.MENU:
            draw_panel(screen, font, [
                "STICK BRIDGE",
                f"Level {sim.selected_level + 1} selected (keys 1-{len(LEVELS)})",
                "ENTER / SPACE start",
                f"Music: {'ON' if audio.music.enabled else 'OFF'} (M)",
            ])
        elif sim.state is GameState.GAMEOVER:
            draw_panel(screen, font, [
                f"Final Score: {sim.final_score}",
                "Restart (R)",
                "Menu (ESC)",
            ])

        pygame.display.flip()


if __name__ == "__main__":
    run()
