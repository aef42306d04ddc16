"""
Training configuration for the shmup environment
Reward shaping presets are keyed by the env's R_* terms
"""

# Environment parameters
ENV_CONFIG = {
    # "render_mode": None,  # rendering during training is far too slow
    "width": 800,
    "height": 600,
    "dt_ms": 1000 / 30,
    "max_steps": 3600,  # 2 minutes at 30 steps/s
    "k_enemies": 8,
    "m_projectiles": 5,
    "p_powerups": 2,
    "skip_transitions": True,
}

# ==============================================================================
# REWARD SHAPING CONFIGURATIONS
# ==============================================================================

# Balanced: clear waves, avoid dying
REWARD_CONFIG_BASELINE = {
    "name": "baseline",
    "description": "Balanced reward shaping",
    "R_KILL": 1.0,          # per enemy destroyed
    "R_SCORE": 0.001,       # per score point
    "R_POWERUP": 0.5,       # per pickup
    "R_LEVEL": 5.0,         # per level cleared
    "R_DAMAGE": 0.05,       # per HP lost
    "R_SHIELD_BREAK": 0.5,
    "R_DEATH": 10.0,        # per life lost
    "R_SHOT": 0.01,         # per volley fired
    "R_TIME": 0.001,        # per step
}

# Dodging matters more than killing
REWARD_CONFIG_SURVIVAL = {
    "name": "survival",
    "description": "Higher damage/death penalties, lower combat rewards",
    "R_KILL": 0.5,
    "R_SCORE": 0.0005,
    "R_POWERUP": 0.5,
    "R_LEVEL": 5.0,
    "R_DAMAGE": 0.2,
    "R_SHIELD_BREAK": 1.0,
    "R_DEATH": 25.0,
    "R_SHOT": 0.02,
    "R_TIME": 0.0005,
}

# Kill fast, accept hits
REWARD_CONFIG_AGGRESSIVE = {
    "name": "aggressive",
    "description": "Higher combat and pickup rewards, lower penalties",
    "R_KILL": 2.0,
    "R_SCORE": 0.002,
    "R_POWERUP": 1.0,
    "R_LEVEL": 10.0,
    "R_DAMAGE": 0.02,
    "R_SHIELD_BREAK": 0.2,
    "R_DEATH": 5.0,
    "R_SHOT": 0.0,
    "R_TIME": 0.002,
}

REWARD_CONFIGS = {
    "baseline": REWARD_CONFIG_BASELINE,
    "survival": REWARD_CONFIG_SURVIVAL,
    "aggressive": REWARD_CONFIG_AGGRESSIVE,
}


def reward_params(name: str) -> dict:
    """R_* terms of a preset, without its name/description"""
    assert name in REWARD_CONFIGS, f"unknown reward config: {name}"
    return {k: v for k, v in REWARD_CONFIGS[name].items() if k.startswith("R_")}


# ==============================================================================
# ALGORITHM HYPERPARAMETERS
# ==============================================================================

PPO_CONFIG = {
    "policy": "MlpPolicy",
    "learning_rate": 3e-4,
    "n_steps": 1024,
    "batch_size": 256,
    "n_epochs": 10,
    "gamma": 0.99,
    "gae_lambda": 0.95,
    "clip_range": 0.2,
    "ent_coef": 0.01,
    "vf_coef": 0.5,
    "max_grad_norm": 0.5,
    "verbose": 1,
}

DQN_CONFIG = {
    "policy": "MlpPolicy",
    "learning_rate": 1e-4,
    "buffer_size": 100_000,
    "learning_starts": 1000,
    "batch_size": 128,
    "tau": 1.0,
    "gamma": 0.99,
    "train_freq": 4,
    "gradient_steps": 1,
    "target_update_interval": 1000,
    "exploration_fraction": 0.1,
    "exploration_initial_eps": 1.0,
    "exploration_final_eps": 0.05,
    "verbose": 1,
}

# ==============================================================================
# TRAINING / EVALUATION SETTINGS
# ==============================================================================

TRAINING_CONFIG = {
    "total_timesteps": 500_000,
    "save_freq": 10_000,
    "eval_freq": 5_000,
    "log_dir": "./logs",
    "model_dir": "./models",
    "tensorboard_log": "./tensorboard_logs",
}

EVAL_CONFIG = {
    "n_episodes": 10,
    "seed": 1000,
    "deterministic": True,
}
