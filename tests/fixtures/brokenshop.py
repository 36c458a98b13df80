from wallhack import RouteTable

raise RuntimeError("database unavailable")

URLS = RouteTable()
