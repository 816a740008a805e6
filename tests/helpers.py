DETAILS = ["Asha Rao", "asha@example.com", "+61 400 000 000", "P1234567"]

ROUTE = ["india", "1", "Australia", "Melbourne"]


def run_messages(agent, session_id, messages):
    """Feed messages one by one, returning the last result"""
    result = None
    for message in messages:
        result = agent.handle_message(session_id, message)
    return result
