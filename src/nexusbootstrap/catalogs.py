"""Reference catalogs provisioned by the seeding steps."""

from typing import Optional, Tuple

from nexusbootstrap.models import Endpoint, PortalRole, ProtocolMapperDefinition, StaticPage

PORTAL_ROLES: Tuple[PortalRole, ...] = (
    PortalRole("platformAdmin", "Platform administrator with full access to every system"),
    PortalRole("superAdmin", "Super administrator with platform-wide authority"),
    PortalRole("tenant", "Tenant with access to its own package"),
    PortalRole("tenantAdmin", "Tenant administrator managing the tenant organisation"),
    PortalRole("member", "Application user (B2B, e-commerce, accounting)"),
    PortalRole("b2b-order-user", "B2B order management user", client_id="b2b-order-app"),
    PortalRole("b2b-quote-user", "B2B quote management user", client_id="b2b-quote-app"),
    PortalRole("accounting-user", "Pre-accounting user", client_id="accounting-app"),
    PortalRole("ecommerce-user", "E-commerce user", client_id="ecommerce-app"),
)

PRIVILEGED_ROLES: Tuple[str, ...] = ("superAdmin", "platformAdmin")


def _claim_config(claim_name: str, json_type: str = "String", **extra: str):
    config = {
        "userinfo.token.claim": "true",
        "id.token.claim": "true",
        "access.token.claim": "true",
        "claim.name": claim_name,
        "jsonType.label": json_type,
    }
    config.update(extra)
    return config


def _attribute_mapper(name: str, attribute: str, claim_name: str, mapper_type: str):
    return ProtocolMapperDefinition(
        name=name,
        protocol_mapper=mapper_type,
        config=_claim_config(claim_name, **{"user.attribute": attribute}),
    )


def claim_mappers(client_id: Optional[str]) -> Tuple[ProtocolMapperDefinition, ...]:
    """Token claim mappers expected on the portal client."""
    property_mapper = "oidc-usermodel-property-mapper"
    attribute_mapper = "oidc-usermodel-attribute-mapper"
    return (
        _attribute_mapper("firstName-mapper", "firstName", "firstName", property_mapper),
        _attribute_mapper("lastName-mapper", "lastName", "lastName", property_mapper),
        _attribute_mapper("email-mapper", "email", "email", property_mapper),
        _attribute_mapper("companyName-mapper", "companyName", "companyName", attribute_mapper),
        _attribute_mapper("keycloakId-mapper", "id", "keycloakId", property_mapper),
        _attribute_mapper("tenantId-mapper", "tenantId", "tenantId", attribute_mapper),
        _attribute_mapper("role-mapper", "role", "role", attribute_mapper),
        ProtocolMapperDefinition(
            name="realm-roles-mapper",
            protocol_mapper="oidc-usermodel-realm-role-mapper",
            config=_claim_config("roles", multivalued="true"),
        ),
        ProtocolMapperDefinition(
            name="client-roles-mapper",
            protocol_mapper="oidc-usermodel-client-role-mapper",
            config=_claim_config("clientRoles", multivalued="true"),
        ),
        ProtocolMapperDefinition(
            name="clientId-hardcoded-mapper",
            protocol_mapper="oidc-hardcoded-claim-mapper",
            config=_claim_config("clientId", **{"claim.value": client_id or ""}),
        ),
        ProtocolMapperDefinition(
            name="portal-permissions-mapper",
            protocol_mapper=attribute_mapper,
            config=_claim_config(
                "permissions",
                json_type="JSON",
                multivalued="true",
                **{"user.attribute": "portalPermissions"},
            ),
        ),
    )


class EndpointCategory:
    TENANT_MANAGEMENT = "Tenant Management"
    USER_MANAGEMENT = "User Management"
    SUBSCRIPTION_MANAGEMENT = "Subscription Management"
    INDUSTRY_MANAGEMENT = "Industry Management"
    COMPANY_INFO_MANAGEMENT = "Company Info Management"
    PRODUCT_MANAGEMENT = "Product Management"
    ORDER_MANAGEMENT = "Order Management"
    EMAIL_CONFIG_MANAGEMENT = "Email Configuration"
    ANALYTICS = "Analytics"
    SUPPORT = "Support"
    CONTACT_MESSAGES = "Contact Messages"
    PAYMENT_MANAGEMENT = "Payment Management"
    ROLE_PERMISSIONS_MANAGEMENT = "Role Permission Management"
    ENDPOINTS_MANAGEMENT = "Endpoint Management"
    CORPORATE_PAGES_MANAGEMENT = "Corporate Page Management"
    SYSTEM_INITIALIZATION = "System Initialization"


def _crud(base: str, controller: str, noun: str, category: str, plural: Optional[str] = None) -> Tuple[Endpoint, ...]:
    return (
        Endpoint(base, "POST", controller, "create", f"Create {noun}", category),
        Endpoint(base, "GET", controller, "findAll", f"List {plural or noun + 's'}", category),
        Endpoint(f"{base}/:id", "GET", controller, "findOne", f"Get {noun} details", category),
        Endpoint(f"{base}/:id", "PATCH", controller, "update", f"Update {noun}", category),
        Endpoint(f"{base}/:id", "DELETE", controller, "remove", f"Delete {noun}", category),
    )


_ADMIN = "/api/platform-admin"

ENDPOINTS: Tuple[Endpoint, ...] = (
    *_crud(f"{_ADMIN}/tenants", "TenantsController", "tenant", EndpointCategory.TENANT_MANAGEMENT),
    Endpoint(
        f"{_ADMIN}/tenants/slug/:slug",
        "GET",
        "TenantsController",
        "findBySlug",
        "Find tenant by slug",
        EndpointCategory.TENANT_MANAGEMENT,
    ),
    *_crud(f"{_ADMIN}/users", "PlatformUsersController", "platform user", EndpointCategory.USER_MANAGEMENT),
    *_crud(
        f"{_ADMIN}/subscription-plans",
        "SubscriptionPlansController",
        "subscription plan",
        EndpointCategory.SUBSCRIPTION_MANAGEMENT,
    ),
    *_crud(f"{_ADMIN}/industries", "IndustriesController", "industry", EndpointCategory.INDUSTRY_MANAGEMENT, "industries"),
    Endpoint(
        f"{_ADMIN}/company-info",
        "GET",
        "CompanyInfoController",
        "find",
        "Get company info",
        EndpointCategory.COMPANY_INFO_MANAGEMENT,
    ),
    Endpoint(
        f"{_ADMIN}/company-info",
        "PATCH",
        "CompanyInfoController",
        "update",
        "Update company info",
        EndpointCategory.COMPANY_INFO_MANAGEMENT,
    ),
    *_crud(f"{_ADMIN}/products", "ProductsController", "product", EndpointCategory.PRODUCT_MANAGEMENT),
    *_crud(f"{_ADMIN}/orders", "OrdersController", "order", EndpointCategory.ORDER_MANAGEMENT),
    *_crud(
        f"{_ADMIN}/email-configs",
        "EmailConfigsController",
        "email configuration",
        EndpointCategory.EMAIL_CONFIG_MANAGEMENT,
    ),
    Endpoint(
        f"{_ADMIN}/analytics/dashboard",
        "GET",
        "AnalyticsController",
        "getDashboard",
        "Get dashboard analytics",
        EndpointCategory.ANALYTICS,
    ),
    *_crud(f"{_ADMIN}/support", "SupportController", "support ticket", EndpointCategory.SUPPORT),
    Endpoint(
        f"{_ADMIN}/contact-messages",
        "GET",
        "ContactMessagesController",
        "findAll",
        "List contact messages",
        EndpointCategory.CONTACT_MESSAGES,
    ),
    Endpoint(
        f"{_ADMIN}/contact-messages/:id/reply",
        "POST",
        "ContactMessagesController",
        "reply",
        "Reply to a contact message",
        EndpointCategory.CONTACT_MESSAGES,
    ),
    *_crud(
        f"{_ADMIN}/iyzipay-info",
        "IyzipayInfoController",
        "payment credential",
        EndpointCategory.PAYMENT_MANAGEMENT,
    ),
    Endpoint(
        f"{_ADMIN}/iyzipay-info/:id/set-active",
        "PATCH",
        "IyzipayInfoController",
        "setActive",
        "Activate payment credential",
        EndpointCategory.PAYMENT_MANAGEMENT,
    ),
    *_crud(
        f"{_ADMIN}/role-permissions",
        "RolePermissionsController",
        "role permission",
        EndpointCategory.ROLE_PERMISSIONS_MANAGEMENT,
    ),
    *_crud(f"{_ADMIN}/endpoints", "EndpointsController", "endpoint", EndpointCategory.ENDPOINTS_MANAGEMENT),
    *_crud(
        f"{_ADMIN}/corporate-pages",
        "CorporatePagesController",
        "corporate page",
        EndpointCategory.CORPORATE_PAGES_MANAGEMENT,
    ),
    Endpoint(
        "/admin/initialization/reinitialize",
        "POST",
        "InitializationController",
        "reinitialize",
        "Re-run portal initialization",
        EndpointCategory.SYSTEM_INITIALIZATION,
    ),
    Endpoint(
        "/admin/initialization/roles/reinitialize",
        "POST",
        "InitializationController",
        "reinitializeRoles",
        "Re-run role provisioning",
        EndpointCategory.SYSTEM_INITIALIZATION,
    ),
    Endpoint(
        "/admin/initialization/client-mappers/reinitialize",
        "POST",
        "InitializationController",
        "reinitializeClientMappers",
        "Re-run token claim mapper provisioning",
        EndpointCategory.SYSTEM_INITIALIZATION,
    ),
    Endpoint(
        "/admin/initialization/endpoints/reinitialize",
        "POST",
        "InitializationController",
        "reinitializeEndpoints",
        "Re-run endpoint catalog provisioning",
        EndpointCategory.SYSTEM_INITIALIZATION,
    ),
    Endpoint(
        "/admin/initialization/role-permissions/reinitialize",
        "POST",
        "InitializationController",
        "reinitializeRolePermissions",
        "Re-run role permission provisioning",
        EndpointCategory.SYSTEM_INITIALIZATION,
    ),
)


class PlatformRole:
    SUPER_ADMIN = "superAdmin"
    PLATFORM_ADMIN = "platformAdmin"
    SUPPORT_AGENT = "supportAgent"
    CONTENT_MANAGER = "contentManager"


STATIC_PAGES: Tuple[StaticPage, ...] = (
    StaticPage(
        page_type="privacy-policy",
        title="Privacy Policy",
        content=(
            "<h2>Privacy Policy</h2><p>This policy explains how your personal data is "
            "collected, used and protected.</p>"
        ),
        meta_title="Privacy Policy",
        meta_description="How we protect your personal data",
    ),
    StaticPage(
        page_type="terms-of-service",
        title="Terms of Service",
        content="<h2>Terms of Service</h2><p>The rules that apply when you use our services.</p>",
        meta_title="Terms of Service",
        meta_description="Terms and conditions for using our services",
    ),
    StaticPage(
        page_type="cookie-policy",
        title="Cookie Policy",
        content="<h2>Cookie Policy</h2><p>Information about the cookies used on our website.</p>",
        meta_title="Cookie Policy",
        meta_description="Information about the cookies we use",
    ),
    StaticPage(
        page_type="kvkk",
        title="KVKK Disclosure Notice",
        content=(
            "<h2>KVKK Disclosure Notice</h2><p>Disclosure notice under Law No. 6698 on the "
            "Protection of Personal Data.</p>"
        ),
        meta_title="KVKK Disclosure Notice",
        meta_description="Disclosure notice under the Personal Data Protection Law",
    ),
)
