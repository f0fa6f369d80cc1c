"""Configuration for the 3D fish school simulation."""

import math

TANK = {
    "limit_x": 35.0,
    "limit_y_min": 3.0,
    "limit_y_max": 32.0,
    "limit_z": 35.0,
    "wall_margin": 8.0,        # Distance from a wall where turning starts
    "wall_strength": 2.0,      # Force at full penetration of the margin
}

SCHOOL = {
    "count": 12,
    "min_count": 1,            # Slider bounds, enforced by the UI only
    "max_count": 50,

    # Neighbor radii
    "separation_radius": 8.0,
    "alignment_radius": 15.0,
    "cohesion_radius": 20.0,
}

FORCES = {
    "separation_weight": 1.5,  # Avoid crowding
    "alignment_weight": 0.8,   # Match neighbor velocities
    "cohesion_weight": 0.5,    # Move toward group center
    "wall_weight": 3.0,
}

FISH = {
    "min_speed": 2.0,          # Fish never stop swimming
    "max_speed": 6.0,
    "max_force": 0.5,
    "initial_velocity_span": (4.0, 2.0, 4.0),
}

IDLE = {
    "amplitude": 0.3,
    "rate_min": 0.5,
    "rate_max": 1.0,
    "impulse_chance": 0.01,
    "impulse_span": (2.0, 1.0, 2.0),
}

SPAWN = {
    "half_width": 30.0,        # x/z spawn range is [-half_width, half_width]
}

ORIENTATION = {
    "min_speed": 0.1,          # Below this the previous facing is kept
    "model_yaw": math.pi,      # Model faces -z at rest
    "offset_step": math.pi / 4,
}

SIMULATION = {
    "max_dt": 0.05,            # Cap dt to prevent physics explosion on lag
    "fixed_dt": 1.0 / 60.0,
    "status_every": 60,
}
