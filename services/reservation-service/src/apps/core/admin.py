from django.contrib import admin, messages

from shared.common.exceptions import DomainError

from .models import Person, Service, ServiceVariant, Package, PackageItem, PackageCredit, Reservation
from .services import CatalogService, ReservationService


@admin.register(Person)
class PersonAdmin(admin.ModelAdmin):
    list_display = ['email', 'first_name', 'last_name', 'role', 'is_active']
    list_filter = ['role', 'is_active']
    search_fields = ['email', 'first_name', 'last_name']


@admin.register(Service)
class ServiceAdmin(admin.ModelAdmin):
    list_display = ['name', 'is_active']
    actions = ['deactivate']

    @admin.action(description='Deactivate selected services')
    def deactivate(self, request, queryset):
        catalog = CatalogService()
        for service in queryset:
            catalog.deactivate_service(service.id)
        self.message_user(request, f"Deactivated {queryset.count()} service(s)")


@admin.register(ServiceVariant)
class ServiceVariantAdmin(admin.ModelAdmin):
    list_display = ['name', 'service', 'duration_minutes', 'price', 'is_active']
    list_filter = ['is_active', 'service']
    actions = ['deactivate']

    @admin.action(description='Deactivate selected variants')
    def deactivate(self, request, queryset):
        catalog = CatalogService()
        for variant in queryset:
            catalog.deactivate_variant(variant.id)
            upcoming = catalog.upcoming_reservation_count(variant.id)
            if upcoming:
                self.message_user(
                    request,
                    f"{variant} still has {upcoming} upcoming reservation(s)",
                    level=messages.WARNING,
                )


class PackageItemInline(admin.TabularInline):
    model = PackageItem
    extra = 1


@admin.register(Package)
class PackageAdmin(admin.ModelAdmin):
    list_display = ['name', 'price', 'is_active']
    inlines = [PackageItemInline]


@admin.register(PackageCredit)
class PackageCreditAdmin(admin.ModelAdmin):
    list_display = ['customer', 'package_item', 'used_quantity', 'expires_at']


@admin.register(Reservation)
class ReservationAdmin(admin.ModelAdmin):
    """
    Scheduling fields are read-only. Placement and rescheduling go
    through ReservationService so its checks always run; here staff edit
    notes and approve or reject pending reservations.
    """

    list_display = ['id', 'provider', 'customer', 'variant', 'status', 'start_time', 'end_time']
    list_filter = ['status']
    readonly_fields = [
        'customer', 'provider', 'variant', 'package_credit',
        'start_time', 'end_time', 'status',
    ]
    actions = ['approve', 'reject']

    def has_add_permission(self, request):
        return False

    @admin.action(description='Approve selected pending reservations')
    def approve(self, request, queryset):
        self._apply(request, queryset, ReservationService().approve_reservation, 'Approved')

    @admin.action(description='Reject selected pending reservations')
    def reject(self, request, queryset):
        self._apply(request, queryset, ReservationService().reject_reservation, 'Rejected')

    def _apply(self, request, queryset, operation, verb):
        done = 0
        for reservation in queryset:
            try:
                operation(reservation.id)
            except DomainError as e:
                self.message_user(request, f"{reservation}: {e.message}", level=messages.ERROR)
            else:
                done += 1
        if done:
            self.message_user(request, f"{verb} {done} reservation(s)")
