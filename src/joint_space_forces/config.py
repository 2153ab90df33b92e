# Output files
LEFT_APO_JACOBIAN_FILE  = "left_apo_jacobian.txt"
RIGHT_APO_JACOBIAN_FILE = "right_apo_jacobian.txt"
RESIDUAL_FORCE_FILE     = "residual_force.txt"
INTERNAL_FORCE_FILE     = "net_internal_values.txt"
MAT_FILE                = "joint_space_forces"     # .mat appended
PLOT_FILE               = "residual_forces"        # .png appended

# Body roles
RIGHT_CONTACT_BODY      = "calcn_r"
LEFT_CONTACT_BODY       = "calcn_l"
RIGHT_ATTACHMENT_BODY   = "femur_r"
LEFT_ATTACHMENT_BODY    = "femur_l"

# APO interface point in the femur frames
ATTACHMENT_OFFSET       = (0.0, -0.35, 0.0)     # m

# Treadmill channels: R force, R COP, L force, L COP, R moment, L moment
CONTACT_CHANNELS        = 18

# RRA accelerations are in degrees except for the pelvis translations
TRANSLATIONAL_DOFS      = (3, 4, 5)

# Frames whose output is discarded at the start of a trial
WARMUP_FRAMES           = 1

# Allowed disagreement between the four stream time tags
TIME_TOLERANCE          = 1e-6                  # s

# Output number format
NUMBER_FORMAT           = "%.10g"
