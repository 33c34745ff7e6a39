# billed/routes.py
ROUTES_PATH = {
    "Login": "/",
    "Bills": "#employee/bills",
    "NewBill": "#employee/bill/new",
    "Dashboard": "#admin/dashboard",
}
