"""Business rules for the Task Rooms API.

Services:
- auth.py: Password hashing, JWT management and registration
- authorization.py: Room and task permission rules
- rooms.py: Rooms, invite codes and membership
- tasks.py: Task CRUD, filtering and task statistics
- users.py: Profiles, search, task counters and streaks
- stats.py: Streak engine and task summaries
"""
