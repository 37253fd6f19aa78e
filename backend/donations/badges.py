DONOR_MILESTONES = [1, 25, 50, 100]
DONOR_BADGE_NAMES = ["First Spark", "Silver Donation", "Gold Donation", "Centurion Donation"]

DRIVER_MILESTONES = [1, 25, 50, 100]
DRIVER_BADGE_NAMES = ["First Spark", "Silver Delivery", "Gold Delivery", "Centurion Delivery"]

BADGE_KEYS = ["first_spark", "silver", "gold", "centurion"]


def badge_progress(count: int, milestones, names) -> dict:
    """Current badge, the next one to earn and how far away it is."""
    timeline = [
        {"milestone": m, "name": names[i] if i < len(names) else f"Badge {m}", "achieved": count >= m}
        for i, m in enumerate(milestones)
    ]
    current = current_key = next_badge = next_milestone = None
    for i in range(len(milestones) - 1, -1, -1):
        if count >= milestones[i]:
            current, current_key = names[i], BADGE_KEYS[i]
            if i < len(milestones) - 1:
                next_badge, next_milestone = names[i + 1], milestones[i + 1]
            break
        next_badge, next_milestone = names[i], milestones[i]

    return {
        "current_badge": current,
        "current_badge_key": current_key,
        "next_badge": next_badge,
        "next_milestone": next_milestone,
        "remaining": max(0, next_milestone - count) if next_milestone is not None else 0,
        "timeline": timeline,
    }
