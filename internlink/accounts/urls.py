from django.urls import path

from . import views

urlpatterns = [
    path("", views.home, name="home"),
    path("signin", views.signin, name="signin"),
    path("signout", views.signout, name="signout"),
    path("signup", views.signup_choose, name="signup"),
    path("signup/intern", views.signup_intern, name="signup_intern"),
    path("signup/organization", views.signup_organization, name="signup_organization"),
    path("password-reset", views.password_reset, name="password_reset"),
    path("profile", views.profile, name="profile"),
]
