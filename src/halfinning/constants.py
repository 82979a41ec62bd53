"""Base/outs state space and play-by-play field constants."""

# Outs needed to end a half-inning
OUTS_PER_INNING = 3

# Base configurations (first, second, third) in reporting order
BASE_CONFIGS = ["000", "100", "010", "001", "110", "101", "011", "111"]

# Runner occupancy bit per base: first=1, second=2, third=4
BASE_BITS = {1: 0b001, 2: 0b010, 3: 0b100}

# 3 outs levels x 8 base configurations, plus the absorbing "3 outs" state
N_TRANSIENT_STATES = 24
N_STATES = N_TRANSIENT_STATES + 1
ABSORBING_STATE = N_TRANSIENT_STATES
ABSORBING_LABEL = "3"

# Batter/runner destination codes (Retrosheet / Chadwick cwevent)
DEST_OUT = 0
DEST_FIRST = 1
DEST_SECOND = 2
DEST_THIRD = 3
DEST_HOME = 4  # 4 and above (5 unearned, 6 team-unearned) all mean scored

# cwevent columns used by the loader, in their raw upper-case form
EVENT_COLUMNS = [
    "GAME_ID", "INN_CT", "BAT_HOME_ID", "OUTS_CT", "EVENT_OUTS_CT",
    "BAT_EVENT_FL", "BASE1_RUN_ID", "BASE2_RUN_ID", "BASE3_RUN_ID",
    "BAT_DEST_ID", "RUN1_DEST_ID", "RUN2_DEST_ID", "RUN3_DEST_ID",
]

RUNNER_ID_COLUMNS = ["base1_run_id", "base2_run_id", "base3_run_id"]
DEST_COLUMNS = ["bat_dest_id", "run1_dest_id", "run2_dest_id", "run3_dest_id"]

# Batting side flag values
AWAY = 0
HOME = 1
