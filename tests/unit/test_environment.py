"""
Unit tests for the gymnasium environment wrapper.
"""
import numpy as np
import pytest

from sweeper import Difficulty, MinesweeperEnv
from sweeper.environment import REVEAL, FLAG, CHORD


@pytest.fixture
def env(scripted_random) -> MinesweeperEnv:
    """3x3 environment whose mine always lands on (0, 0)."""
    environment = MinesweeperEnv(difficulty=Difficulty(3, 3, 1), render_mode="ansi")
    environment.reset(seed=0)
    environment.board.rng = scripted_random([(0, 0)])
    return environment


class TestSpaces:
    """Test observation and action spaces."""

    def test_observation_space_matches_board(self) -> None:
        environment = MinesweeperEnv()
        assert environment.observation_space.shape == (9, 9)
        assert environment.action_space.n == 3 * 81

    def test_reset_returns_hidden_board(self) -> None:
        environment = MinesweeperEnv()
        obs, info = environment.reset(seed=1)
        assert np.all(obs == -1)
        assert info["game_state"] == "NOT_STARTED"
        assert info["total_safe"] == 71

    def test_action_encoding(self, env: MinesweeperEnv) -> None:
        action = env.encode_action(CHORD, 2, 1)
        assert env.decode_action(action) == (CHORD, 2, 1)


class TestStep:
    """Test rewards and termination."""

    def test_safe_reveal_reward(self, env: MinesweeperEnv) -> None:
        obs, reward, terminated, truncated, info = env.step(
            env.encode_action(REVEAL, 1, 1)
        )
        assert reward == 1.0
        assert terminated is False
        assert truncated is False
        assert obs[1, 1] == 1
        assert info["revealed"] == 1

    def test_refused_action_penalty(self, env: MinesweeperEnv) -> None:
        env.step(env.encode_action(REVEAL, 1, 1))
        _, reward, _, _, _ = env.step(env.encode_action(REVEAL, 1, 1))
        assert reward == pytest.approx(-0.1)

    def test_flag_then_chord_wins(self, env: MinesweeperEnv) -> None:
        env.step(env.encode_action(REVEAL, 1, 1))
        _, reward, _, _, info = env.step(env.encode_action(FLAG, 0, 0))
        assert reward == 0.0
        assert info["flags"] == 1

        _, reward, terminated, _, info = env.step(env.encode_action(CHORD, 1, 1))
        assert reward == 10.0
        assert terminated is True
        assert info["game_state"] == "WON"

    def test_mine_reveal_loses(self, env: MinesweeperEnv) -> None:
        env.step(env.encode_action(REVEAL, 1, 1))
        obs, reward, terminated, _, _ = env.step(env.encode_action(REVEAL, 0, 0))
        assert reward == -10.0
        assert terminated is True
        assert obs[0, 0] == 9

    def test_same_seed_same_layout(self) -> None:
        first = MinesweeperEnv()
        second = MinesweeperEnv()
        first.reset(seed=42)
        second.reset(seed=42)
        action = first.encode_action(REVEAL, 4, 4)
        obs_a, *_ = first.step(action)
        obs_b, *_ = second.step(action)
        assert np.array_equal(obs_a, obs_b)


class TestActionMask:
    """Test the action mask."""

    def test_initial_mask(self, env: MinesweeperEnv) -> None:
        mask = env.get_action_mask().reshape(3, 9)
        assert mask[REVEAL].all()
        assert mask[FLAG].all()
        assert not mask[CHORD].any()

    def test_mask_after_flag_and_reveal(self, env: MinesweeperEnv) -> None:
        env.step(env.encode_action(REVEAL, 1, 1))
        env.step(env.encode_action(FLAG, 0, 0))
        mask = env.get_action_mask().reshape(3, 9)

        assert not mask[REVEAL][0]  # flagged
        assert not mask[REVEAL][4]  # revealed
        assert mask[FLAG][0]  # can unflag at the cap
        assert not mask[FLAG][1]  # cap reached
        assert mask[CHORD][4]


class TestRender:
    """Test text rendering through the environment."""

    def test_render_ansi(self, env: MinesweeperEnv) -> None:
        env.step(env.encode_action(REVEAL, 1, 1))
        lines = env.render().splitlines()
        assert lines[1].split() == [".", "1", "."]
