"""
Route guard for the web client.

The client asks where a role may go before rendering a screen. Guarded
sections are matched by path prefix; everything outside them falls back to
the login screen.
"""

LOGIN_PATH = '/login'
ADMIN_DASHBOARD = '/admin/dashboard'
STUDENT_DASHBOARD = '/student/dashboard'

PUBLIC_PATHS = (LOGIN_PATH,)

GUARDED_SECTIONS = (
    ('/admin', ('admin', 'teacher'), ADMIN_DASHBOARD),
    ('/student', ('student', 'parent'), STUDENT_DASHBOARD),
)

ROLES = ('admin', 'teacher', 'student', 'parent')


def is_role_allowed(role, allowed_roles):
    """An empty allow list means any signed-in role"""
    if not role:
        return False
    return not allowed_roles or role in allowed_roles


def landing_path_for_role(role):
    if role in ('admin', 'teacher'):
        return ADMIN_DASHBOARD
    return STUDENT_DASHBOARD


def _normalize(path):
    path = (path or '/').split('?', 1)[0].split('#', 1)[0]
    if not path.startswith('/'):
        path = '/' + path
    if len(path) > 1:
        path = path.rstrip('/')
    return path


def find_section(path):
    for prefix, roles, dashboard in GUARDED_SECTIONS:
        if path == prefix or path.startswith(prefix + '/'):
            return prefix, roles, dashboard
    return None


def resolve_route(path, role=None):
    """
    Decide whether `role` may open `path`.

    Returns (allowed, redirect_to). redirect_to is None when the path can be
    shown as is.
    """
    path = _normalize(path)

    if path in PUBLIC_PATHS:
        return True, None

    section = find_section(path)
    if section is None:
        return False, LOGIN_PATH

    prefix, allowed_roles, dashboard = section
    if not role:
        return False, LOGIN_PATH
    if not is_role_allowed(role, allowed_roles):
        return False, landing_path_for_role(role)
    if path == prefix:
        # Section index redirects to its dashboard
        return True, dashboard
    return True, None
