# barbershop/data.py

SERVICES = {
    "haircut": {"label": "Haircut", "price": 35.0},
    "fade": {"label": "Fade", "price": 40.0},
    "beard_trim": {"label": "Beard trim", "price": 25.0},
    "shape_up": {"label": "Shape up", "price": 20.0},
    "eyebrows": {"label": "Eyebrows", "price": 10.0},
    "cut_and_beard": {"label": "Haircut + beard", "price": 55.0},
}

# 0=Sun, 1=Mon ... 6=Sat
DEFAULT_SCHEDULE = {
    "0": {"active": False, "start": "09:00", "end": "19:00"},
    "1": {"active": True, "start": "09:00", "end": "19:00"},
    "2": {"active": True, "start": "09:00", "end": "19:00"},
    "3": {"active": True, "start": "09:00", "end": "19:00"},
    "4": {"active": True, "start": "09:00", "end": "19:00"},
    "5": {"active": True, "start": "09:00", "end": "19:00"},
    "6": {"active": True, "start": "09:00", "end": "19:00"},
}

# allowed values for the ?status= filter on appointment listings
STATUS_FILTERS = ("pending", "confirmed", "completed", "cancelled", "all")
