INERTIA = "X-Inertia"
VERSION = "X-Inertia-Version"
LOCATION = "X-Inertia-Location"
PARTIAL_COMPONENT = "X-Inertia-Partial-Component"
PARTIAL_ONLY = "X-Inertia-Partial-Data"
PARTIAL_EXCEPT = "X-Inertia-Partial-Except"
RESET = "X-Inertia-Reset"
