"""Headless entry point: train the lizard, optionally checkpoint, then replay the policy."""

import argparse
import sys
from datetime import datetime
from typing import List, Optional

from .domain.qlearning import TrainingSession
from .domain.types import LizardConfig, Snapshot
from .ui.console import describe_cell, render_snapshot
from .utils.checkpoint_manager import CheckpointManager
from .utils.pacing import fixed_delay


def build_parser() -> argparse.ArgumentParser:
    defaults = LizardConfig()
    parser = argparse.ArgumentParser(description="Train a lizard with Q-learning on a 3x3 grid")
    parser.add_argument("--episodes", type=int, default=defaults.episodes, help="Number of episodes to train")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible runs")
    parser.add_argument("--step-delay", type=int, default=0, help="Milliseconds between training steps")
    parser.add_argument("--playback-delay", type=int, default=0, help="Milliseconds between playback steps")
    parser.add_argument("--playback-steps", type=int, default=defaults.playback_max_steps,
                        help="Give up greedy playback after this many steps")
    parser.add_argument("--show-steps", action="store_true", help="Print every training snapshot")
    parser.add_argument("--no-playback", action="store_true", help="Skip greedy playback after training")
    parser.add_argument("--quiet", action="store_true", help="Only print the final summary")
    parser.add_argument("--checkpoints-dir", type=str, default="training_checkpoints",
                        help="Directory for checkpoint files")
    parser.add_argument("--save-checkpoint", type=str, nargs="?", const="", default=None,
                        help="Save a checkpoint after training (optional id)")
    parser.add_argument("--load-checkpoint", type=str, help="Checkpoint id to continue from")
    return parser


def print_snapshot(snapshot: Snapshot):
    print(render_snapshot(snapshot, show_q_table=False))
    print()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    config = LizardConfig(
        episodes=args.episodes,
        seed=args.seed,
        step_delay_ms=args.step_delay,
        playback_delay_ms=args.playback_delay,
        playback_max_steps=args.playback_steps,
        verbose=not args.quiet,
    )
    session = TrainingSession(config)
    checkpoints = CheckpointManager(args.checkpoints_dir)

    print("🦎 Lizard Q-Learning")
    print("=" * 50)

    if args.load_checkpoint:
        print(f"📂 Loading checkpoint: {args.load_checkpoint}")
        checkpoint = checkpoints.load_checkpoint(args.load_checkpoint)
        if checkpoint and checkpoints.apply_checkpoint(checkpoint, session):
            print(f"✅ Checkpoint loaded: {checkpoint.episodes_completed} episodes, "
                  f"epsilon {checkpoint.exploration_rate:.3f}")
        else:
            print("❌ Failed to load checkpoint. Starting fresh.")

    if not args.quiet:
        print(f"\n⚙️  Training Configuration:")
        print(f"   Episodes: {config.episodes}")
        print(f"   Max steps per episode: {config.max_steps}")
        print(f"   Learning rate: {config.learning_rate}")
        print(f"   Discount rate: {config.discount_rate}")
        print(f"   Epsilon: {session.exploration_rate:.3f} → {config.exploration_floor}")

    sink = print_snapshot if args.show_steps else None

    try:
        result = session.train(sink=sink, pacer=fixed_delay(config.step_delay_ms))

        print(f"\n🎉 Training completed!")
        print(f"   Total episodes: {result.total_episodes}")
        print(f"   Five crickets reached: {result.successful_episodes}")
        print(f"   Success rate: {result.success_rate:.1%}")
        print(f"   Average reward: {result.average_reward:.2f}")
        print(f"   Final epsilon: {result.final_epsilon:.3f}")

        if args.save_checkpoint is not None:
            checkpoint_id = args.save_checkpoint or (
                f"lizard_ep{session.episodes_completed}_{datetime.now().strftime('%Y%m%d_%H%M%S')}"
            )
            path = checkpoints.create_checkpoint(checkpoint_id, session)
            print(f"✅ Checkpoint saved: {checkpoint_id} -> {path}")

        if args.no_playback:
            return 0

        print(f"\n🧪 Showing learned policy...")
        playback = session.play_greedy(
            sink=print_snapshot if not args.quiet else None,
            pacer=fixed_delay(config.playback_delay_ms),
        )
        if playback.reached_terminal:
            x, y = playback.final_position
            print(f"✅ Reached {describe_cell(x, y)} at {playback.final_position} "
                  f"in {playback.steps_taken} steps (reward {playback.total_reward:+.0f})")
        else:
            print(f"❌ {playback.stopping_reason}")

        return 0

    except KeyboardInterrupt:
        print(f"\n⏹️  Training interrupted by user")
        return 1
    except Exception as e:
        print(f"\n❌ Training failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
