# ── Central defaults (tune here, not scattered across files) ──

# World
N_PARTICLES = 1000
WORLD_WIDTH = 1920.0
WORLD_HEIGHT = 1080.0
DT = 1.0 / 60.0
PATTERN = 'scatter'
MASS_RANGE = (1.0, 10.0)
RADIUS_SCALE = 1.0
VELOCITY_RANGE = (-5.0, 5.0)

# Anchor body (index 0)
ANCHOR_MASS = 1.0e5
ANCHOR_RADIUS = 40.0
RING_RADIUS_RANGE = (150.0, 500.0)

# Physics
G = 1.0
MIN_DIST2 = 1e-3
COLLISION_POLICY = 'merge'
RESTITUTION = 1.0

# Rendering
RESOLUTION = (1280, 720)
BG_COLOR = (0, 0, 0)
COLOR_MODE = 'hsv'
FPS = 60
PAN_SPEED = 10.0
ZOOM_STEP = 0.05

# Simulation
N_STEPS = 2000
SEED = 42
