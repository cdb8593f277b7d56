"""Catalog of every module, page and action the application knows.

The catalog is the closed set that tier grants expand over: a module tier of
``edit`` grants exactly the catalog actions whose required tier is ``edit``
or lower. Lookups never raise; an unknown module, page or action comes back
as ``None``/``False`` so callers can treat it as "not granted".
"""

from typing import Any, Dict, Iterator, NamedTuple, Optional, Tuple

from .model import Module, PermissionTier


class ActionDefinition(NamedTuple):
    id: str
    name: str
    description: str


class PageDefinition(NamedTuple):
    page: str
    path: str
    name: str
    actions: Tuple[ActionDefinition, ...]

    def action(self, action_id: str) -> Optional[ActionDefinition]:
        for action in self.actions:
            if action.id == action_id:
                return action
        return None


def _page(page: str, path: str, name: str, *actions: Tuple[str, str, str]) -> PageDefinition:
    return PageDefinition(page, path, name, tuple(ActionDefinition(*a) for a in actions))


MODULE_CATALOG: Dict[Module, Tuple[PageDefinition, ...]] = {
    Module.PUPILS: (
        _page(
            "list", "/pupils", "Pupils List",
            ("view_list", "View pupils list", "Can see the list of pupils"),
            ("search_filter", "Search and filter", "Can search and filter pupils"),
            ("export_data", "Export data", "Can export pupils data to Excel/CSV"),
            ("view_details_link", "View details link", "Can click to view pupil details"),
            ("edit_from_list", "Edit from list", "Can access edit option from list"),
            ("delete_from_list", "Delete from list", "Can delete pupils from list"),
            ("add_sibling_from_list", "Add sibling from list", "Can add siblings from list"),
            ("bulk_actions", "Bulk actions", "Can select multiple pupils for bulk operations"),
            ("view_class_link", "View class details", "Can navigate to class details"),
        ),
        _page(
            "create", "/pupils/new", "Create Pupil",
            ("access_page", "Access create page", "Can access the create pupil page"),
            ("create_pupil", "Create new pupil", "Can submit new pupil form"),
            ("add_guardian", "Add guardian info", "Can add guardian information"),
            ("upload_photo", "Upload photo", "Can upload pupil photo"),
        ),
        _page(
            "edit", "/pupils/edit", "Edit Pupil",
            ("access_page", "Access edit page", "Can access the edit pupil page"),
            ("edit_basic_info", "Edit basic info", "Can edit basic pupil information"),
            ("edit_guardian", "Edit guardian info", "Can edit guardian information"),
            ("change_photo", "Change photo", "Can change pupil photo"),
            ("save_changes", "Save changes", "Can save edits to pupil record"),
        ),
        _page(
            "detail", "/pupil-detail", "Pupil Details",
            ("access_page", "Access details page", "Can view pupil details page"),
            ("view_personal_info", "View personal info", "Can see personal information"),
            ("view_academic_info", "View academic info", "Can see academic information"),
            ("view_guardian_info", "View guardian info", "Can see guardian information"),
            ("view_medical_info", "View medical info", "Can see medical information"),
            ("view_exam_records", "View exam records", "Can see examination records"),
            ("view_siblings", "View siblings", "Can see sibling information"),
            ("fee_collection", "Fee collection", "Can access fee collection"),
            ("manage_assignments", "Manage fee assignments", "Can manage fee assignments"),
            ("uniform_tracking", "Uniform tracking", "Can access uniform tracking"),
            ("requirement_tracking", "Requirement tracking", "Can access requirement tracking"),
            ("print_id_card", "Print ID card", "Can print student ID card"),
            ("edit_details", "Edit details", "Can edit from details page"),
            ("change_status", "Change status", "Can change pupil status"),
            ("manage_id_codes", "Manage ID codes", "Can manage additional IDs"),
            ("add_sibling", "Add sibling", "Can add new sibling"),
            ("delete_pupil", "Delete pupil", "Can delete pupil record"),
            ("view_status_history", "View status history", "Can see status change history"),
            ("view_promotion_history", "View promotion history", "Can see promotion history"),
        ),
        _page(
            "promote", "/pupils/promote", "Promote Pupils",
            ("access_page", "Access promote page", "Can access promotion page"),
            ("select_pupils", "Select pupils", "Can select pupils for promotion"),
            ("promote_pupils", "Promote pupils", "Can promote pupils to higher class"),
            ("demote_pupils", "Demote pupils", "Can demote pupils to lower class"),
            ("transfer_pupils", "Transfer pupils", "Can transfer pupils between classes"),
        ),
    ),
    Module.FEES: (
        _page(
            "list", "/fees", "Fee Structures",
            ("view_list", "View fee structures", "Can see fee structure list"),
            ("create_structure", "Create fee structure", "Can create new fee structures"),
            ("edit_structure", "Edit fee structure", "Can edit fee structures"),
            ("delete_structure", "Delete fee structure", "Can delete fee structures"),
            ("manage_adjustments", "Manage adjustments", "Can manage fee adjustments"),
            ("view_reports", "View reports", "Can view fee reports"),
        ),
        _page(
            "collection", "/fees/collection", "Fee Collection",
            ("access_page", "Access collection page", "Can access fee collection"),
            ("search_pupils", "Search pupils", "Can search for pupils"),
            ("view_balance", "View balance", "Can view fee balances"),
            ("collect_fees", "Collect fees", "Can collect fee payments"),
        ),
        _page(
            "collect", "/fees/collect", "Collect Payment",
            ("access_page", "Access payment page", "Can access payment collection"),
            ("record_payment", "Record payment", "Can record fee payments"),
            ("print_receipt", "Print receipt", "Can print payment receipts"),
            ("revert_payment", "Revert payment", "Can revert payments"),
            ("view_history", "View payment history", "Can view payment history"),
        ),
    ),
    Module.EXAMS: (
        _page(
            "list", "/exams", "Exams List",
            ("view_list", "View exams", "Can see exam list"),
            ("create_exam", "Create exam", "Can create new exams"),
            ("edit_exam", "Edit exam", "Can edit exam details"),
            ("delete_exam", "Delete exam", "Can delete exams"),
            ("manage_types", "Manage exam types", "Can manage exam types"),
        ),
        _page(
            "results", "/exams/results", "Exam Results",
            ("view_results", "View results", "Can view exam results"),
            ("enter_results", "Enter results", "Can enter exam results"),
            ("edit_results", "Edit results", "Can edit exam results"),
            ("publish_results", "Publish results", "Can publish results"),
            ("generate_reports", "Generate reports", "Can generate result reports"),
            ("print_reports", "Print reports", "Can print report cards"),
        ),
    ),
    Module.STAFF: (
        _page(
            "list", "/staff", "Staff List",
            ("view_list", "View staff list", "Can see staff members"),
            ("create_staff", "Create staff", "Can add new staff"),
            ("edit_staff", "Edit staff", "Can edit staff information"),
            ("delete_staff", "Delete staff", "Can delete staff records"),
            ("assign_roles", "Assign roles", "Can assign staff roles"),
        ),
    ),
    Module.CLASSES: (
        _page(
            "list", "/classes", "Classes List",
            ("view_list", "View classes", "Can see class list"),
            ("create_class", "Create class", "Can create new classes"),
            ("edit_class", "Edit class", "Can edit class details"),
            ("delete_class", "Delete class", "Can delete classes"),
            ("assign_teachers", "Assign teachers", "Can assign class teachers"),
            ("assign_subjects", "Assign subjects", "Can assign subjects to classes"),
        ),
        _page(
            "detail", "/class-detail", "Class Details",
            ("view_details", "View details", "Can view class details"),
            ("view_pupils", "View pupils", "Can see pupils in class"),
            ("manage_subjects", "Manage subjects", "Can manage class subjects"),
            ("view_statistics", "View statistics", "Can view class statistics"),
        ),
    ),
    Module.ATTENDANCE: (
        _page(
            "record", "/attendance", "Record Attendance",
            ("view_page", "View attendance page", "Can access attendance page"),
            ("record_attendance", "Record attendance", "Can mark attendance"),
            ("edit_attendance", "Edit attendance", "Can edit attendance records"),
            ("view_reports", "View reports", "Can view attendance reports"),
            ("export_data", "Export data", "Can export attendance data"),
        ),
    ),
    Module.SUBJECTS: (
        _page(
            "list", "/subjects", "Subjects List",
            ("view_list", "View subjects", "Can see subject list"),
            ("create_subject", "Create subject", "Can create new subjects"),
            ("edit_subject", "Edit subject", "Can edit subject details"),
            ("delete_subject", "Delete subject", "Can delete subjects"),
        ),
    ),
    Module.ACADEMIC_YEARS: (
        _page(
            "list", "/academic-years", "Academic Years",
            ("view_list", "View academic years", "Can see academic years"),
            ("create_year", "Create academic year", "Can create new academic years"),
            ("edit_year", "Edit academic year", "Can edit academic year details"),
            ("delete_year", "Delete academic year", "Can delete academic years"),
            ("activate_year", "Activate year", "Can set active academic year"),
            ("lock_year", "Lock year", "Can lock academic years"),
            ("manage_terms", "Manage terms", "Can manage terms within years"),
        ),
    ),
    Module.BANKING: (
        _page(
            "list", "/banking", "Banking List",
            ("view_accounts", "View accounts", "Can see pupil accounts"),
            ("create_account", "Create account", "Can create new accounts"),
            ("view_transactions", "View transactions", "Can see transactions"),
            ("make_deposit", "Make deposit", "Can make deposits"),
            ("make_withdrawal", "Make withdrawal", "Can make withdrawals"),
            ("view_statements", "View statements", "Can view account statements"),
            ("print_statements", "Print statements", "Can print statements"),
        ),
        _page(
            "loans", "/banking/loans", "Loans Management",
            ("view_loans", "View loans", "Can see loans"),
            ("create_loan", "Create loan", "Can create new loans"),
            ("process_repayment", "Process repayment", "Can process loan repayments"),
            ("view_loan_reports", "View reports", "Can view loan reports"),
        ),
    ),
    Module.USERS: (
        _page(
            "list", "/users", "Users List",
            ("view_users", "View users", "Can see user list"),
            ("create_user", "Create user", "Can create new users"),
            ("edit_user", "Edit user", "Can edit user permissions"),
            ("delete_user", "Delete user", "Can delete users"),
            ("reset_password", "Reset password", "Can reset user passwords"),
            ("manage_permissions", "Manage permissions", "Can manage user permissions"),
        ),
    ),
    Module.NOTIFICATIONS: (
        _page(
            "list", "/notifications", "Notifications",
            ("view_notifications", "View notifications", "Can see notifications"),
            ("send_notification", "Send notification", "Can send notifications"),
            ("manage_groups", "Manage groups", "Can manage notification groups"),
            ("view_history", "View history", "Can view notification history"),
            ("manage_templates", "Manage templates", "Can manage notification templates"),
        ),
    ),
    Module.BULK_SMS: (
        _page(
            "send", "/bulk-sms", "Bulk SMS",
            ("view_page", "Access bulk SMS", "Can access bulk SMS page"),
            ("send_sms", "Send SMS", "Can send bulk SMS messages"),
            ("view_history", "View history", "Can view SMS history"),
            ("manage_templates", "Manage templates", "Can manage SMS templates"),
            ("view_balance", "View balance", "Can view SMS credit balance"),
        ),
    ),
    Module.PROCUREMENT: (
        _page(
            "items", "/procurement/items", "Procurement Items",
            ("view_items", "View items", "Can see procurement items"),
            ("create_item", "Create item", "Can create new items"),
            ("edit_item", "Edit item", "Can edit items"),
            ("delete_item", "Delete item", "Can delete items"),
        ),
        _page(
            "purchases", "/procurement/purchases", "Purchases",
            ("view_purchases", "View purchases", "Can see purchases"),
            ("create_purchase", "Create purchase", "Can record new purchases"),
            ("edit_purchase", "Edit purchase", "Can edit purchase records"),
            ("delete_purchase", "Delete purchase", "Can delete purchases"),
            ("approve_purchase", "Approve purchase", "Can approve purchases"),
        ),
        _page(
            "budget", "/procurement/budget", "Budget Management",
            ("view_budget", "View budget", "Can see budgets"),
            ("create_budget", "Create budget", "Can create budgets"),
            ("edit_budget", "Edit budget", "Can edit budgets"),
            ("approve_budget", "Approve budget", "Can approve budgets"),
            ("view_comparison", "View comparison", "Can view budget vs actual"),
        ),
    ),
    Module.UNIFORMS: (
        _page(
            "list", "/uniforms", "Uniforms List",
            ("view_uniforms", "View uniforms", "Can see uniform items"),
            ("create_uniform", "Create uniform", "Can add new uniforms"),
            ("edit_uniform", "Edit uniform", "Can edit uniform details"),
            ("delete_uniform", "Delete uniform", "Can delete uniforms"),
        ),
        _page(
            "tracking", "/uniform-tracking", "Uniform Tracking",
            ("view_tracking", "View tracking", "Can see uniform tracking"),
            ("record_payment", "Record payment", "Can record uniform payments"),
            ("record_collection", "Record collection", "Can record uniform collection"),
            ("view_history", "View history", "Can view tracking history"),
        ),
    ),
    Module.REQUIREMENTS: (
        _page(
            "list", "/requirements", "Requirements List",
            ("view_requirements", "View requirements", "Can see requirement items"),
            ("create_requirement", "Create requirement", "Can add new requirements"),
            ("edit_requirement", "Edit requirement", "Can edit requirement details"),
            ("delete_requirement", "Delete requirement", "Can delete requirements"),
        ),
        _page(
            "tracking", "/requirement-tracking", "Requirement Tracking",
            ("view_tracking", "View tracking", "Can see requirement tracking"),
            ("record_payment", "Record payment", "Can record requirement payments"),
            ("record_release", "Record release", "Can record requirement release"),
            ("view_history", "View history", "Can view tracking history"),
        ),
    ),
    Module.SETTINGS: (
        _page(
            "school", "/about-school", "School Settings",
            ("view_settings", "View settings", "Can see school settings"),
            ("edit_general", "Edit general info", "Can edit general information"),
            ("edit_contact", "Edit contact", "Can edit contact details"),
            ("edit_vision", "Edit vision/mission", "Can edit vision and mission"),
            ("manage_logo", "Manage logo", "Can manage school logo"),
        ),
        _page(
            "photos", "/admin/photos", "Photo Management",
            ("view_photos", "View photos", "Can see photos"),
            ("upload_photos", "Upload photos", "Can upload new photos"),
            ("edit_photos", "Edit photos", "Can edit photo details"),
            ("delete_photos", "Delete photos", "Can delete photos"),
            ("set_primary", "Set primary", "Can set primary photos"),
        ),
    ),
    Module.REPORTS: (
        _page(
            "dashboard", "/", "Dashboard",
            ("view_dashboard", "View dashboard", "Can see dashboard"),
            ("view_statistics", "View statistics", "Can see system statistics"),
            ("view_charts", "View charts", "Can see analytical charts"),
        ),
        _page(
            "reports", "/reports", "Reports Center",
            ("view_reports", "View reports", "Can see reports"),
            ("generate_reports", "Generate reports", "Can generate new reports"),
            ("export_reports", "Export reports", "Can export reports"),
            ("print_reports", "Print reports", "Can print reports"),
        ),
    ),
    Module.PUPIL_HISTORY: (
        _page(
            "list", "/pupil-history", "Pupil History",
            ("view_history", "View pupil history", "Can see complete pupil history and timelines"),
            ("search_filter", "Search and filter", "Can search and filter pupil history records"),
            ("view_personal_info", "View personal info", "Can see personal information in history"),
            ("view_class_history", "View class history", "Can see class progression history"),
            ("view_status_history", "View status history", "Can see status change history"),
            ("view_achievements", "View achievements", "Can see pupil achievements"),
            ("view_fees_history", "View fees history", "Can see fees payment history"),
            ("export_history", "Export history", "Can export pupil history data"),
            ("expand_details", "Expand details", "Can expand and view detailed information"),
            ("view_academic_summary", "View academic summary", "Can see academic performance summary"),
        ),
    ),
    Module.EVENTS: (
        _page(
            "calendar", "/events", "Events & Calendar",
            ("view_calendar", "View calendar", "Can see events calendar"),
            ("view_events", "View events", "Can see event list"),
            ("create_event", "Create event", "Can create new events"),
            ("edit_event", "Edit event", "Can edit event details"),
            ("delete_event", "Delete event", "Can delete events"),
            ("view_event_details", "View event details", "Can see detailed event information"),
            ("manage_event_types", "Manage event types", "Can manage event categories and types"),
            ("schedule_recurring", "Schedule recurring events", "Can create recurring events"),
            ("invite_participants", "Invite participants", "Can invite people to events"),
            ("export_calendar", "Export calendar", "Can export calendar data"),
            ("view_attendance", "View event attendance", "Can see who attended events"),
            ("send_reminders", "Send reminders", "Can send event reminders"),
        ),
    ),
    Module.PROMOTION: (
        _page(
            "promote", "/pupils/promote", "Promote/Demote Pupils",
            ("view_page", "View promotion page", "Can access the promotion/demotion page"),
            ("select_pupils", "Select pupils", "Can select pupils for promotion/demotion"),
            ("promote_pupils", "Promote pupils", "Can promote pupils to next class"),
            ("demote_pupils", "Demote pupils", "Can demote pupils to previous class"),
            ("bulk_promote", "Bulk promote", "Can promote multiple pupils at once"),
            ("bulk_demote", "Bulk demote", "Can demote multiple pupils at once"),
            ("view_promotion_history", "View promotion history", "Can see historical promotion data"),
            ("undo_promotion", "Undo promotion", "Can reverse recent promotions"),
            ("transfer_pupils", "Transfer pupils", "Can transfer pupils between classes"),
            ("view_criteria", "View promotion criteria", "Can see promotion requirements"),
            ("export_promotion_data", "Export promotion data", "Can export promotion reports"),
        ),
    ),
}


# Minimum tier each action needs when access is granted by tier rather than
# by naming the action. Sets are disjoint; a tier also grants the sets below it.
VIEW_ONLY_ACTIONS = frozenset([
    "view_list", "search_filter", "view_details_link", "access_page",
    "view_personal_info", "view_academic_info", "view_guardian_info",
    "view_medical_info", "view_exam_records", "view_siblings",
    "view_status_history", "view_promotion_history", "view_details",
    "view_balance", "view_results", "view_reports", "view_pupils",
    "view_statistics", "view_classes", "view_history",
])

EDIT_ACTIONS = frozenset([
    "create_pupil", "edit_basic_info", "edit_guardian", "change_photo",
    "save_changes", "add_guardian", "upload_photo", "select_pupils",
    "record_attendance", "edit_attendance", "enter_results", "edit_results",
    "create_structure", "edit_structure", "record_payment", "collect_fees",
    "create_exam", "edit_exam", "create_staff", "edit_staff", "create_class",
    "edit_class", "assign_teachers", "assign_subjects",
])

FULL_ACCESS_ACTIONS = frozenset([
    "delete_from_list", "delete_pupil", "delete_structure", "delete_exam",
    "delete_staff", "delete_class", "revert_payment", "change_status",
    "promote_pupils", "demote_pupils", "transfer_pupils", "manage_id_codes",
    "manage_assignments", "publish_results", "export_data", "print_receipt",
    "print_reports", "manage_adjustments", "manage_types", "assign_roles",
    "bulk_actions", "add_sibling_from_list", "add_sibling",
])

# Fallback classification for actions not in the sets above
VIEW_PREFIXES = ("view_", "search_", "expand_")
EDIT_PREFIXES = (
    "create_", "edit_", "record_", "enter_", "upload_", "add_", "make_",
    "process_", "send_", "save_", "select_", "collect_", "invite_", "schedule_",
)


def required_tier(action_id: str) -> PermissionTier:
    """Lowest tier that grants ``action_id`` through a tier rule.

    Anything that cannot be classified needs ``full_access``.
    """
    if action_id in VIEW_ONLY_ACTIONS:
        return PermissionTier.VIEW_ONLY
    if action_id in EDIT_ACTIONS:
        return PermissionTier.EDIT
    if action_id in FULL_ACCESS_ACTIONS:
        return PermissionTier.FULL_ACCESS
    if action_id.startswith(VIEW_PREFIXES):
        return PermissionTier.VIEW_ONLY
    if action_id.startswith(EDIT_PREFIXES):
        return PermissionTier.EDIT
    return PermissionTier.FULL_ACCESS


def implied_tier(action_id: str) -> PermissionTier:
    """Coarse tier that an explicit grant of ``action_id`` stands for.

    Used to derive a module tier from action-level grants: delete/remove
    actions imply full access, create/edit/update actions and any other
    action that needs more than view-only imply edit.
    """
    if "delete" in action_id or "remove" in action_id:
        return PermissionTier.FULL_ACCESS
    if "edit" in action_id or "update" in action_id or "create" in action_id:
        return PermissionTier.EDIT
    if required_tier(action_id) is not PermissionTier.VIEW_ONLY:
        return PermissionTier.EDIT
    return PermissionTier.VIEW_ONLY


def resolve_module(module: Any) -> Optional[Module]:
    """Resolve a module name to the enum, or ``None`` if it is not known."""
    if isinstance(module, Module):
        return module
    if not isinstance(module, str):
        return None
    try:
        return Module(module)
    except ValueError:
        return None


def get_pages(module: Module) -> Tuple[PageDefinition, ...]:
    return MODULE_CATALOG.get(module, ())


def get_page(module: Module, page_id: str) -> Optional[PageDefinition]:
    for page in get_pages(module):
        if page.page == page_id:
            return page
    return None


def is_catalog_action(module: Module, page_id: str, action_id: str) -> bool:
    page = get_page(module, page_id)
    return page is not None and page.action(action_id) is not None


def iter_catalog() -> Iterator[Tuple[Module, PageDefinition, ActionDefinition]]:
    """Yield every (module, page, action) triple in catalog order."""
    for module, pages in MODULE_CATALOG.items():
        for page in pages:
            for action in page.actions:
                yield module, page, action
