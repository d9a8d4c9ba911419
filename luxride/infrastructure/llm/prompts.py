def build_suggest_prompt(owner_id: str, past_bookings: str) -> str:
    return (
        "You are an assistant that personalizes luxury ride settings from a user's past bookings.\n"
        "Return ONLY valid JSON. No markdown. No extra text.\n"
        "Output schema:\n"
        "  {\"preferredVehicleType\": \"...\", \"preferredTemperature\": \"...\", \"preferredMusicGenre\": \"...\"}\n"
        "Rules:\n"
        "  - Analyze the past bookings and return the most frequently preferred settings.\n"
        "  - preferredVehicleType should be one of: sedan, suv, van, limousine, luxury_bus.\n"
        "  - preferredTemperature is a cabin temperature such as \"21°C\".\n"
        "  - If there are no past bookings, suggest sensible defaults for a luxury ride.\n"
        "  - All three values must be non-empty strings.\n"
        "\n"
        f"User ID: {owner_id}\n"
        f"Past Bookings: {past_bookings}\n"
    )
