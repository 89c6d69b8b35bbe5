"""Garmin strength exercise taxonomy.

Maps the FIT profile's ``exercise_category`` / ``exercise_name`` codes to
display names. The vendor keeps adding codes; extending these tables is a
data-only change, bump ``TAXONOMY_VERSION`` when you do.
"""

from typing import Optional

TAXONOMY_VERSION = "2024.1"

# Vendor code for "generic exercise within this category"
GENERIC_EXERCISE_CODE = 65534

EXERCISE_CATEGORIES: dict[int, str] = {
    0: "Bench Press",
    1: "Calf Raise",
    2: "Cardio",
    3: "Carry",
    4: "Chop",
    5: "Core",
    6: "Crunch",
    7: "Curl",
    8: "Deadlift",
    9: "Flye",
    10: "Hip Raise",
    11: "Hip Stability",
    12: "Hip Swing",
    13: "Hyperextension",
    14: "Lateral Raise",
    15: "Leg Curl",
    16: "Leg Raise",
    17: "Lunge",
    18: "Olympic Lift",
    19: "Plank",
    20: "Plyo",
    21: "Pull Up",
    22: "Push Up",
    23: "Row",
    24: "Shoulder Press",
    25: "Shoulder Stability",
    26: "Shrug",
    27: "Sit Up",
    28: "Squat",
    29: "Total Body",
    30: "Triceps Extension",
    31: "Warm Up",
    32: "Run",
    65534: "Unknown",
    65535: "Unknown",
}

# Highest category code a strength set can carry
MAX_STRENGTH_CATEGORY = 32

EXERCISE_NAMES: dict[int, dict[int, str]] = {
    0: {
        0: "Barbell Bench Press",
        1: "Barbell Board Bench Press",
        2: "Barbell Floor Press",
        3: "Close-Grip Barbell Bench Press",
        4: "Decline Barbell Bench Press",
        5: "Dumbbell Bench Press",
        6: "Dumbbell Floor Press",
        7: "Incline Barbell Bench Press",
        8: "Incline Dumbbell Bench Press",
        9: "Neutral-Grip Dumbbell Bench Press",
        GENERIC_EXERCISE_CODE: "Bench Press",
    },
    7: {
        0: "Alternating Dumbbell Biceps Curl",
        1: "Alternating Dumbbell Biceps Curl on Swiss Ball",
        2: "Alternating Incline Dumbbell Biceps Curl",
        3: "Barbell Biceps Curl",
        4: "Barbell Reverse Wrist Curl",
        5: "Barbell Wrist Curl",
        6: "Behind the Back Barbell Reverse Curl",
        7: "Behind the Back One-Arm Cable Curl",
        8: "Cable Biceps Curl",
        9: "Cable Hammer Curl",
        10: "Cheating Barbell Biceps Curl",
        11: "Close-Grip EZ Bar Biceps Curl",
        12: "Cross Body Dumbbell Hammer Curl",
        13: "Dead Hang Biceps Curl",
        14: "Decline Hammer Curl",
        15: "Dumbbell Biceps Curl",
        16: "Dumbbell Biceps Curl with Static Hold",
        17: "Dumbbell Hammer Curl",
        18: "Dumbbell Reverse Curl",
        19: "EZ-Bar Preacher Curl",
        GENERIC_EXERCISE_CODE: "Biceps Curl",
    },
    8: {
        0: "Barbell Deadlift",
        1: "Barbell Straight-Leg Deadlift",
        2: "Dumbbell Deadlift",
        3: "Dumbbell Single-Leg Deadlift",
        4: "Dumbbell Straight-Leg Deadlift",
        5: "Kettlebell Deadlift",
        6: "Sumo Deadlift",
        7: "Sumo Deadlift High Pull",
        8: "Trap Bar Deadlift",
        GENERIC_EXERCISE_CODE: "Deadlift",
    },
    17: {
        0: "Overhead Lunge",
        1: "Lunge Matrix",
        2: "Weighted Lunge",
        3: "Walking Lunge",
        4: "Dumbbell Lunge",
        5: "Barbell Lunge",
        GENERIC_EXERCISE_CODE: "Lunge",
    },
    21: {
        0: "Banded Pull-Ups",
        1: "Burpee Pull-Up",
        2: "Close-Grip Chin-Up",
        3: "Close-Grip Lat Pulldown",
        4: "Crossover Chin-Up",
        5: "EZ-Bar Pullover",
        6: "Hanging Knee Raise",
        7: "Kneeling Lat Pulldown",
        8: "Kneeling Underhand Grip Lat Pulldown",
        9: "Lat Pulldown",
        10: "Machine Lat Pulldown",
        11: "Mixed-Grip Chin-Up",
        12: "Mixed-Grip Pull-Up",
        13: "Reverse-Grip Pulldown",
        14: "Standing Cable Pullover",
        15: "Straight-Arm Pulldown",
        16: "Swiss Ball EZ-Bar Pullover",
        17: "Towel Pull-Up",
        18: "Weighted Pull-Up",
        GENERIC_EXERCISE_CODE: "Pull-Up",
    },
    22: {
        0: "Chest Press",
        1: "Clapping Push-Up",
        2: "Close-Grip Medicine Ball Push-Up",
        3: "Close-Hands Push-Up",
        4: "Decline Push-Up",
        5: "Diamond Push-Up",
        6: "Explosive Crossover Push-Up",
        7: "Explosive Push-Up",
        8: "Feet Elevated Side to Side Push-Up",
        9: "Hand Release Push-Up",
        10: "Incline Push-Up",
        11: "Isometric Explosive Push-Up",
        12: "Judo Push-Up",
        13: "Kneeling Push-Up",
        14: "Medicine Ball Chest Pass",
        15: "Medicine Ball Push-Up",
        16: "Modified Push-Up",
        17: "One-Arm Push-Up",
        18: "Parallette Handstand Push-Up",
        19: "Push-Up",
        20: "Push-Up and Row",
        21: "Push-Up Plus",
        22: "Push-Up with Feet on Swiss Ball",
        23: "Push-Up with One Hand on Medicine Ball",
        24: "Ring Push-Up",
        GENERIC_EXERCISE_CODE: "Push-Up",
    },
    23: {
        0: "Alternating Dumbbell Row",
        1: "Barbell Bent-Over Row",
        2: "Barbell Shrug",
        3: "Body Weight Mid-Row",
        4: "Cable Row",
        5: "Cable Row with External Rotation",
        6: "Dumbbell Row",
        7: "Elevated Feet Inverted Row",
        8: "Face Pull",
        9: "Face Pull with External Rotation",
        10: "Inverted Row",
        11: "Kettlebell Row",
        12: "Modified Inverted Row",
        13: "Neutral-Grip Alternating Dumbbell Row",
        14: "One-Arm Bent-Over Row",
        15: "One-Arm Cable Row",
        16: "One-Arm Cable Row and Rotation",
        17: "One-Arm Dumbbell Row",
        18: "Prone Row",
        19: "Reverse Grip Barbell Row",
        20: "Rope Handle Cable Row",
        21: "Seated Cable Row",
        22: "Seated Dumbbell Row",
        GENERIC_EXERCISE_CODE: "Row",
    },
    24: {
        0: "Alternating Dumbbell Shoulder Press",
        1: "Arnold Press",
        2: "Barbell Front Squat to Push Press",
        3: "Barbell Push Press",
        4: "Barbell Shoulder Press",
        5: "Dead Curl Press",
        6: "Dumbbell Alternating Shoulder Press and Twist",
        7: "Dumbbell Hammer Curl to Lunge to Press",
        8: "Dumbbell Push Press",
        9: "Floor Inverted Shoulder Press",
        10: "Inverted Shoulder Press",
        11: "One-Arm Push Press",
        12: "Overhead Barbell Press",
        13: "Overhead Dumbbell Press",
        14: "Seated Barbell Shoulder Press",
        15: "Seated Dumbbell Shoulder Press",
        16: "Single-Arm Standing Dumbbell Press",
        17: "Single-Arm Landmine Press",
        18: "Standing Barbell Shoulder Press",
        19: "Standing Dumbbell Shoulder Press",
        GENERIC_EXERCISE_CODE: "Shoulder Press",
    },
    28: {
        0: "Leg Press",
        1: "Back Squat",
        2: "Weighted Wall Squat",
        3: "Wall Ball Squat",
        4: "Dumbbell Squat",
        5: "Box Squat",
        6: "Bulgarian Squat",
        7: "Front Squat",
        8: "Goblet Squat",
        9: "Overhead Squat",
        10: "Pistol Squat",
        11: "Plie Squat",
        12: "Split Squat",
        13: "Sumo Squat",
        14: "Zercher Squat",
        15: "Barbell Back Squat",
        16: "Barbell Box Squat",
        17: "Barbell Front Squat",
        GENERIC_EXERCISE_CODE: "Squat",
    },
    30: {
        0: "Bench Dip",
        1: "Body Weight Dip",
        2: "Cable Kickback",
        3: "Cable Lying Triceps Extension",
        4: "Cable Overhead Triceps Extension",
        5: "Dumbbell Kickback",
        6: "Dumbbell Lying Triceps Extension",
        7: "EZ-Bar Overhead Triceps Extension",
        8: "EZ-Bar Skullcrusher",
        9: "Narrow-Grip Bench Press",
        10: "One-Arm Cable Overhead Triceps Extension",
        11: "One-Arm Dumbbell Overhead Triceps Extension",
        12: "Overhead Dumbbell Triceps Extension",
        13: "Reverse-Grip Cable Pressdown",
        14: "Reverse-Grip Triceps Pressdown",
        15: "Rope Pressdown",
        16: "Seated Barbell Overhead Triceps Extension",
        17: "Seated Dumbbell Overhead Triceps Extension",
        18: "Seated EZ-Bar Overhead Triceps Extension",
        19: "Seated One-Arm Overhead Dumbbell Extension",
        20: "Single-Arm Cable Triceps Extension",
        21: "Swiss Ball Dumbbell Lying Triceps Extension",
        22: "Swiss Ball EZ-Bar Lying Triceps Extension",
        23: "Swiss Ball EZ-Bar Overhead Triceps Extension",
        24: "Tabletop Dip",
        25: "Triceps Extension Machine",
        26: "Triceps Pressdown",
        27: "Weighted Dip",
        GENERIC_EXERCISE_CODE: "Triceps Extension",
    },
}


def category_name(category: int) -> str:
    return EXERCISE_CATEGORIES.get(category, f"Exercise {category}")


def resolve_exercise_name(category: int, exercise: Optional[int] = None) -> str:
    """Return the display name for a (category, exercise) code pair.

    Falls back to the category name when the exercise code is missing or
    not in the table, and to ``"Exercise {category}"`` when the category
    itself is unknown. Never raises.
    """
    if exercise is not None:
        name = EXERCISE_NAMES.get(category, {}).get(exercise)
        if name:
            return name
    return category_name(category)
