def member_name(user):
    """Display name for a team member: full name, then email"""
    profile = getattr(user, "profile", None)
    if profile is not None and profile.full_name:
        return profile.full_name
    full_name = user.get_full_name() if user else ""
    if full_name:
        return full_name
    if profile is not None and profile.email:
        return profile.email
    return (user.email if user else "") or "Desconocido"
