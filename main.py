# main.py
"""
Main entry point for the Wheels of Fortune animation.

This script orchestrates the whole lifecycle:
1. Loads configuration from `config.json`.
2. Initializes the logging system.
3. Opens the window and generates the first layout.
4. Runs the frame loop, regenerating on request or resize.
5. Handles clean shutdown.
"""
import logging
import time
from utils import setup_logging, load_config
import cProfile
import pstats
import io


def main():
    """
    The main function to run the animation.
    """
    # Logging is not set up yet, so we use a print for this one error.
    try:
        config = load_config('config.json')
    except Exception as e:
        print(f"FATAL: Could not load config.json. Error: {e}")
        return

    setup_logging(config)

    logging.info("--- Wheels of Fortune Starting ---")

    layout_params = config.get('layout', {})
    anim_params = config.get('animation', {})
    run_params = config.get('run_control', {})
    vis_params = config.get('visualization', {})

    from context import new_seed
    from layout import regenerate
    from visualization import Visualizer, Action, coalesce_actions

    # The visualizer determines the canvas size, so it comes first.
    visualizer = Visualizer(vis_params, anim_params)

    seed = run_params.get('seed')
    if seed is None:
        seed = new_seed()

    def build(current_seed):
        return regenerate(current_seed, visualizer.width, visualizer.height, layout_params, anim_params)

    try:
        scene = build(seed)
    except ValueError as e:
        logging.critical(f"Could not generate the initial layout: {e}")
        visualizer.close()
        return

    profiler = cProfile.Profile()

    log_throttle = run_params.get('log_throttle_frames', 600)
    max_frames = run_params.get('max_frames', 0)

    running = True
    frame_num = 0
    start = time.perf_counter()

    profiler.enable()
    while running:
        for action in coalesce_actions(visualizer.poll_events()):
            if action is Action.QUIT:
                running = False
            elif action is Action.REGENERATE_NEW_SEED:
                seed = new_seed()
                scene = build(seed)
            elif action is Action.REGENERATE_SAME_SEED:
                scene = build(seed)
            elif action is Action.SCREENSHOT:
                visualizer.save_screenshot()
        if not running:
            break

        visualizer.draw(scene, time.perf_counter() - start)
        frame_num += 1

        # Hot loops must throttle logs
        if frame_num % log_throttle == 0:
            elapsed = time.perf_counter() - start
            logging.info(f"Frame {frame_num} | {frame_num / elapsed:.1f} fps average")
            logging.debug(
                f"Scene seed {scene.seed}: {len(scene.wheels)} wheels, "
                f"{len(scene.arcs)} arcs, {len(scene.dots)} dots"
            )

        if max_frames and frame_num >= max_frames:
            logging.info(f"Reached max_frames ({max_frames}). Stopping.")
            running = False
    profiler.disable()

    visualizer.close()
    logging.info("Frame loop finished.")

    logging.info("--- Performance Profile ---")
    s = io.StringIO()
    stats = pstats.Stats(profiler, stream=s).sort_stats('cumtime')
    stats.print_stats(20)
    logging.info(f"\n{s.getvalue()}")

    logging.info("--- Wheels of Fortune Shutting Down ---")


if __name__ == "__main__":
    main()
