"""
URL mappings for the medical-representative portal API.

Paths follow the front-end's action style (``.../create``,
``.../<id>/update``) and deliberately omit trailing slashes.
"""
from django.urls import path, include

from .auth_views import login_view, signup_view, jwt_refresh_view, jwt_logout_view
from .views import admin_users, ai, doctors, health, notifications, patients, sterilization, users


urlpatterns = [
    path('', include('django_prometheus.urls')),
    path('healthz', health.healthz, name='healthz'),

    # Authentication
    path('api/auth/login', login_view, name='login_view'),
    path('api/auth/signup', signup_view, name='signup_view'),
    path('api/auth/refresh', jwt_refresh_view, name='jwt_refresh_view'),
    path('api/auth/logout', jwt_logout_view, name='jwt_logout_view'),

    # Profile
    path('api/user/profile', users.user_profile, name='user_profile'),
    path('api/user/profile/update', users.user_profile_update, name='user_profile_update'),
    path('api/user/change-password', users.change_password, name='change_password'),

    # User administration
    path('api/admin/users', admin_users.list_users, name='admin_list_users'),
    path('api/admin/users/create', admin_users.create_user, name='admin_create_user'),
    path('api/admin/users/<int:pk>/update', admin_users.update_user, name='admin_update_user'),
    path('api/admin/users/<int:pk>/delete', admin_users.delete_user, name='admin_delete_user'),
    path('api/admin/users/<int:pk>/role', admin_users.set_user_role, name='admin_set_user_role'),
    path('api/admin/users/<int:pk>/toggle-active', admin_users.toggle_user_active, name='admin_toggle_user_active'),
    path('api/admin/users/<int:pk>/approve', admin_users.approve_user, name='admin_approve_user'),
    path('api/admin/patient-stats', admin_users.admin_patient_stats, name='admin_patient_stats'),

    # Doctor directory
    path('api/doctors', doctors.list_doctors, name='list_doctors'),
    path('api/doctors/create', doctors.create_doctor, name='create_doctor'),
    path('api/doctors/partners', doctors.partner_dashboard, name='partner_dashboard'),
    path('api/doctors/specialties', doctors.list_specialties, name='list_specialties'),
    path('api/doctors/export', doctors.export_doctors, name='export_doctors'),
    path('api/doctors/export-excel', doctors.export_doctors_excel, name='export_doctors_excel'),
    path('api/doctors/import', doctors.import_doctors, name='import_doctors'),
    path('api/doctors/uncheck-partners', doctors.uncheck_all_partners, name='uncheck_all_partners'),
    path('api/doctors/reset-referrals', doctors.reset_all_referrals, name='reset_all_referrals'),
    path('api/doctors/<str:pk>', doctors.doctor_detail, name='doctor_detail'),
    path('api/doctors/<str:pk>/update', doctors.update_doctor, name='update_doctor'),
    path('api/doctors/<str:pk>/delete', doctors.delete_doctor, name='delete_doctor'),
    path('api/doctors/<str:pk>/referrals', doctors.adjust_referrals, name='adjust_referrals'),
    path('api/doctors/<str:pk>/referral-notes', doctors.set_referral_notes, name='set_referral_notes'),
    path('api/doctors/<str:pk>/toggle-partner', doctors.toggle_partner, name='toggle_partner'),
    path('api/doctors/<str:pk>/available-days', doctors.toggle_available_day, name='toggle_available_day'),
    path('api/doctors/<str:pk>/location', doctors.set_location, name='set_location'),

    # Referred patients
    path('api/patients', patients.list_patients, name='list_patients'),
    path('api/patients/create', patients.create_patient, name='create_patient'),
    path('api/patients/delete-all', patients.delete_all_patients, name='delete_all_patients'),
    path('api/patients/by-doctor/<str:doctor_id>/delete', patients.delete_patients_by_doctor, name='delete_patients_by_doctor'),
    path('api/patients/<str:pk>', patients.patient_detail, name='patient_detail'),
    path('api/patients/<str:pk>/update', patients.update_patient, name='update_patient'),
    path('api/patients/<str:pk>/delete', patients.delete_patient, name='delete_patient'),

    # Notifications
    path('api/notifications', notifications.list_notifications, name='list_notifications'),
    path('api/notifications/create', notifications.create_notification, name='create_notification'),
    path('api/notifications/read-all', notifications.mark_all_notifications_read, name='mark_all_notifications_read'),
    path('api/notifications/clear', notifications.clear_notifications, name='clear_notifications'),
    path('api/notifications/<int:pk>/read', notifications.mark_notification_read, name='mark_notification_read'),

    # AI helpers
    path('api/ai/chat', ai.ai_chat, name='ai_chat'),
    path('api/ai/translate', ai.ai_translate, name='ai_translate'),
    path('api/ai/internet-search', ai.ai_internet_search, name='ai_internet_search'),
    path('api/ai/suggest-doctors', ai.ai_suggest_doctors, name='ai_suggest_doctors'),
    path('api/ai/invoice', ai.ai_invoice, name='ai_invoice'),
    path('api/ai/simulation', ai.ai_simulation, name='ai_simulation'),

    # Sterilization
    path('api/sterilization/request', sterilization.request_sterilization, name='request_sterilization'),
    path('api/sterilization/sets', sterilization.list_instrument_sets, name='list_instrument_sets'),
    path('api/sterilization/sets/<str:pk>/advance', sterilization.advance_instrument_set, name='advance_instrument_set'),
]
