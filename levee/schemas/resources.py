from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

# Contacts


class ContactInput(BaseModel):
    email: str
    name: str | None = None
    phone: str | None = None
    company: str | None = None
    employees: str | None = None
    message: str | None = None
    source: str | None = None
    tags: list[str] | None = None
    funnel_slug: str | None = None
    list_slug: str | None = None
    score: bool | None = None
    utm_source: str | None = None
    utm_medium: str | None = None
    utm_campaign: str | None = None
    meta: dict[str, str] | None = None


class ContactResponse(BaseModel):
    id: str
    email: str
    name: str = ""


class ContactInfo(BaseModel):
    id: str
    email: str
    name: str = ""
    phone: str | None = None
    company: str | None = None
    status: str = ""
    email_verified: bool = False
    tags: list[str] = Field(default_factory=list)
    lists: list[str] = Field(default_factory=list)
    custom_fields: dict[str, str] | None = None
    lead_score: int | None = None
    source: str | None = None
    emails_sent: int = 0
    emails_opened: int = 0
    emails_clicked: int = 0
    last_email_at: str | None = None
    last_open_at: str | None = None
    last_click_at: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


class UpdateContactInput(BaseModel):
    name: str | None = None
    phone: str | None = None
    company: str | None = None
    custom_fields: dict[str, str] | None = None


class ContactActivity(BaseModel):
    event: str
    timestamp: str
    details: str | None = None


# Emails


class SendEmailInput(BaseModel):
    to: str
    template_slug: str | None = None
    subject: str | None = None
    body: str | None = None
    text_body: str | None = None
    from_name: str | None = None
    from_email: str | None = None
    reply_to: str | None = None
    variables: dict[str, str] | None = None
    tags: list[str] | None = None
    meta: dict[str, str] | None = None


class SendEmailResponse(BaseModel):
    success: bool
    message_id: str
    status: str
    message: str | None = None


class EmailStatus(BaseModel):
    message_id: str
    to: str
    subject: str = ""
    status: str
    sent_at: str | None = None
    delivered_at: str | None = None
    opened_at: str | None = None
    clicked_at: str | None = None
    bounced_at: str | None = None
    bounce_type: str | None = None
    opens: int = 0
    clicks: int = 0


class EmailEvent(BaseModel):
    event: str
    timestamp: str
    data: str | None = None


# Tracking


class TrackEventInput(BaseModel):
    event: str
    email: str | None = None
    properties: dict[str, str] | None = None


# Sequences


class EnrollSequenceInput(BaseModel):
    sequence_slug: str
    email: str
    variables: dict[str, str] | None = None
    start_at_step: int | None = None
    scheduled_for: str | None = None


class EnrollSequenceResponse(BaseModel):
    success: bool
    enrollment_id: str
    status: str
    message: str | None = None


class SequenceEnrollment(BaseModel):
    enrollment_id: str
    sequence_slug: str
    sequence_name: str = ""
    status: str
    current_step: int = 0
    total_steps: int = 0
    enrolled_at: str | None = None
    next_email_at: str | None = None
    completed_at: str | None = None
    emails_sent: int = 0
    emails_opened: int = 0
    emails_clicked: int = 0


# Billing


class CustomerInput(BaseModel):
    email: str
    name: str | None = None
    phone: str | None = None
    meta: dict[str, str] | None = None


class CustomerResponse(BaseModel):
    id: str
    stripe_customer_id: str
    email: str
    name: str = ""


class CheckoutItem(BaseModel):
    price_id: str
    quantity: int = Field(default=1, gt=0)


class CheckoutInput(BaseModel):
    customer_email: str
    line_items: list[CheckoutItem]
    mode: Literal["payment", "subscription"]
    success_url: str
    cancel_url: str


class CheckoutResponse(BaseModel):
    session_id: str
    checkout_url: str


class SubscriptionInput(BaseModel):
    customer_id: str
    price_ids: list[str]


class SubscriptionResponse(BaseModel):
    id: str
    stripe_subscription_id: str
    status: str


class UsageInput(BaseModel):
    subscription_item_id: str
    quantity: int


class PortalInput(BaseModel):
    customer_id: str
    return_url: str


class PortalResponse(BaseModel):
    portal_url: str


# Customers


class CustomerInfo(BaseModel):
    id: str
    email: str
    name: str = ""
    phone: str | None = None
    stripe_customer_id: str | None = None
    status: str = ""
    total_spent: int = 0
    order_count: int = 0
    subscription_count: int = 0
    created_at: str | None = None


class Invoice(BaseModel):
    id: str
    stripe_invoice_id: str | None = None
    number: str = ""
    status: str
    amount_due: int = 0
    amount_paid: int = 0
    currency: str = ""
    description: str | None = None
    invoice_pdf_url: str | None = None
    hosted_url: str | None = None
    due_date: str | None = None
    paid_at: str | None = None
    created_at: str | None = None


class OrderItem(BaseModel):
    product_name: str
    quantity: int = 1
    unit_price: int = 0
    total_price: int = 0


class CustomerOrder(BaseModel):
    id: str
    order_number: str = ""
    status: str
    total_cents: int = 0
    currency: str = ""
    items: list[OrderItem] = Field(default_factory=list)
    payment_method: str | None = None
    paid_at: str | None = None
    fulfilled_at: str | None = None
    created_at: str | None = None


class Subscription(BaseModel):
    id: str
    stripe_subscription_id: str | None = None
    product_name: str = ""
    price_name: str | None = None
    status: str
    amount_cents: int = 0
    currency: str = ""
    interval: str = ""
    current_period_start: str | None = None
    current_period_end: str | None = None
    cancel_at_period_end: bool = False
    trial_end: str | None = None
    created_at: str | None = None


class Payment(BaseModel):
    id: str
    stripe_payment_id: str | None = None
    amount_cents: int = 0
    currency: str = ""
    status: str
    description: str | None = None
    payment_method: str | None = None
    receipt_url: str | None = None
    refunded_at: str | None = None
    created_at: str | None = None


# Webhooks


class RegisterWebhookInput(BaseModel):
    url: str
    events: list[str]
    secret: str | None = None
    active: bool | None = None


class RegisterWebhookResponse(BaseModel):
    success: bool
    webhook_id: str
    secret: str = ""
    message: str | None = None


class Webhook(BaseModel):
    id: str
    url: str
    events: list[str] = Field(default_factory=list)
    active: bool = True
    created_at: str | None = None
    deliveries_total: int = 0
    deliveries_success: int = 0
    deliveries_failed: int = 0
    last_delivery_at: str | None = None
    last_status: int | None = None


class UpdateWebhookInput(BaseModel):
    url: str | None = None
    events: list[str] | None = None
    active: bool | None = None


class TestWebhookResponse(BaseModel):
    success: bool
    status_code: int = 0
    response: str | None = None
    error: str | None = None


class WebhookLog(BaseModel):
    id: str
    event: str
    payload: str = ""
    status_code: int = 0
    response: str | None = None
    error: str | None = None
    duration_ms: int = 0
    delivered_at: str | None = None


# Stats


class StatsOptions(BaseModel):
    start_date: str | None = None
    end_date: str | None = None
    group_by: Literal["day", "week", "month"] | None = None


class StatsOverview(BaseModel):
    total_contacts: int = 0
    new_contacts: int = 0
    active_contacts: int = 0
    emails_sent: int = 0
    emails_delivered: int = 0
    emails_opened: int = 0
    emails_clicked: int = 0
    emails_bounced: int = 0
    open_rate: float = 0.0
    click_rate: float = 0.0
    bounce_rate: float = 0.0
    total_revenue: int = 0
    order_count: int = 0
    avg_order_value: float = 0.0
    new_subscriptions: int = 0


class EmailStatsPoint(BaseModel):
    date: str
    sent: int = 0
    delivered: int = 0
    opened: int = 0
    clicked: int = 0
    bounced: int = 0
    open_rate: float = 0.0
    click_rate: float = 0.0


class EmailStats(BaseModel):
    stats: list[EmailStatsPoint] = Field(default_factory=list)
    total_sent: int = 0
    total_delivered: int = 0
    total_opened: int = 0
    total_clicked: int = 0
    total_bounced: int = 0
    avg_open_rate: float = 0.0
    avg_click_rate: float = 0.0


class RevenueStatsPoint(BaseModel):
    date: str
    revenue: int = 0
    order_count: int = 0
    new_subscriptions: int = 0
    churned: int = 0


class RevenueStats(BaseModel):
    stats: list[RevenueStatsPoint] = Field(default_factory=list)
    total_revenue: int = 0
    total_orders: int = 0
    total_subscriptions: int = 0
    total_churned: int = 0
    mrr: int = 0


class ContactStatsPoint(BaseModel):
    date: str
    new_contacts: int = 0
    unsubscribed: int = 0
    bounced: int = 0
    net_growth: int = 0


class ContactStats(BaseModel):
    stats: list[ContactStatsPoint] = Field(default_factory=list)
    total_active: int = 0
    total_unsubscribed: int = 0
    total_bounced: int = 0
    net_growth: int = 0


# Content


class ContentPost(BaseModel):
    id: str
    title: str
    slug: str
    content: str = ""
    excerpt: str | None = None
    status: str = ""
    meta_title: str | None = None
    meta_description: str | None = None
    featured_image: str | None = None
    category_name: str | None = None
    category_slug: str | None = None
    author_id: str | None = None
    created_at: str | None = None
    published_at: str | None = None


class ContentPage(BaseModel):
    id: str
    title: str
    slug: str
    content: str = ""
    status: str = ""
    meta_title: str | None = None
    meta_description: str | None = None
    featured_image: str | None = None
    template_name: str | None = None
    template_slug: str | None = None
    created_at: str | None = None
    published_at: str | None = None


class ContentCategory(BaseModel):
    id: str
    name: str
    slug: str
    description: str | None = None


class ListPostsResponse(BaseModel):
    posts: list[ContentPost] = Field(default_factory=list)
    total: int = 0


class ListPagesResponse(BaseModel):
    pages: list[ContentPage] = Field(default_factory=list)
    total: int = 0


class ListCategoriesResponse(BaseModel):
    categories: list[ContentCategory] = Field(default_factory=list)


# Site


class SiteSettings(BaseModel):
    site_name: str | None = None
    tagline: str | None = None
    logo_url: str | None = None
    favicon_url: str | None = None
    contact_email: str | None = None
    contact_phone: str | None = None
    social_links: dict[str, str] | None = None
    default_meta_title: str | None = None
    default_meta_description: str | None = None
    og_image_url: str | None = None


class NavigationItem(BaseModel):
    id: str
    label: str
    url: str | None = None
    target: str | None = None
    icon: str | None = None
    is_active: bool = True
    children: list["NavigationItem"] | None = None


class NavigationMenu(BaseModel):
    id: str
    name: str
    slug: str
    location: str = ""
    items: list[NavigationItem] = Field(default_factory=list)


class ListMenusResponse(BaseModel):
    menus: list[NavigationMenu] = Field(default_factory=list)


class Author(BaseModel):
    id: str
    display_name: str
    bio: str | None = None
    avatar_url: str | None = None
    website_url: str | None = None
    twitter_handle: str | None = None
    linkedin_url: str | None = None
    github_handle: str | None = None


class ListAuthorsResponse(BaseModel):
    authors: list[Author] = Field(default_factory=list)


# Orders


class OrderInput(BaseModel):
    email: str
    name: str | None = None
    company: str | None = None
    product_slug: str | None = None
    funnel_step_slug: str | None = None
    workshop_id: int | None = None
    include_bump: bool | None = None
    amount_cents: int | None = Field(default=None, ge=0)
    currency: str | None = None
    success_url: str | None = None
    cancel_url: str | None = None
    meta: dict[str, str] | None = None


class OrderResponse(BaseModel):
    success: bool
    checkout_url: str | None = None
    session_id: str | None = None
    message: str | None = None
