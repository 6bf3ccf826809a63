SCHEMA = """
CREATE TABLE IF NOT EXISTS plans (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    name TEXT UNIQUE NOT NULL,
    max_customers INTEGER CHECK (max_customers >= 0),
    max_notifications_per_month INTEGER CHECK (max_notifications_per_month >= 0),
    max_emails_per_month INTEGER CHECK (max_emails_per_month >= 0),
    price NUMERIC(10, 2)
);

CREATE TABLE IF NOT EXISTS businesses (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    owner_id UUID NOT NULL,
    name TEXT NOT NULL,
    plan_name TEXT,
    created_at TIMESTAMPTZ DEFAULT now()
);

CREATE TABLE IF NOT EXISTS customers (
    id UUID PRIMARY KEY,
    business_id UUID NOT NULL REFERENCES businesses(id),
    name TEXT NOT NULL,
    surname TEXT NOT NULL,
    email TEXT NOT NULL,
    phone TEXT NOT NULL,
    birth_date DATE NOT NULL,
    os_family TEXT NOT NULL,
    active BOOLEAN NOT NULL DEFAULT TRUE,
    visits_total INTEGER NOT NULL DEFAULT 0 CHECK (visits_total >= 0),
    cycle_visits INTEGER NOT NULL DEFAULT 0 CHECK (cycle_visits >= 0 AND cycle_visits <= 10),
    rewards_available INTEGER NOT NULL DEFAULT 0 CHECK (rewards_available >= 0),
    rewards_redeemed INTEGER NOT NULL DEFAULT 0 CHECK (rewards_redeemed >= 0),
    wallet_pass_url TEXT,
    version INTEGER NOT NULL DEFAULT 1,
    created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
    last_visit_at TIMESTAMPTZ NOT NULL DEFAULT now()
);

CREATE INDEX IF NOT EXISTS idx_customers_business ON customers(business_id, created_at DESC);
CREATE INDEX IF NOT EXISTS idx_customers_business_email ON customers(business_id, email);

CREATE TABLE IF NOT EXISTS tenant_counters (
    business_id UUID PRIMARY KEY REFERENCES businesses(id),
    total_customers INTEGER NOT NULL DEFAULT 0 CHECK (total_customers >= 0),
    notifications_this_month INTEGER NOT NULL DEFAULT 0,
    emails_this_month INTEGER NOT NULL DEFAULT 0,
    month_key TEXT,
    updated_at TIMESTAMPTZ DEFAULT now()
);

-- Locks the counter row and increments total_customers when under the limit.
-- Returns the new total, or NULL (nothing written) when the limit is reached.
-- A NULL limit never blocks.
CREATE OR REPLACE FUNCTION increment_customer_count(
    p_business_id UUID,
    p_max_customers INTEGER,
    p_month_key TEXT
) RETURNS INTEGER
LANGUAGE plpgsql AS $$
DECLARE
    v_counter tenant_counters%ROWTYPE;
BEGIN
    INSERT INTO tenant_counters (business_id, month_key)
    VALUES (p_business_id, p_month_key)
    ON CONFLICT (business_id) DO NOTHING;

    SELECT * INTO v_counter
    FROM tenant_counters
    WHERE business_id = p_business_id
    FOR UPDATE;

    IF p_max_customers IS NOT NULL AND v_counter.total_customers >= p_max_customers THEN
        RETURN NULL;
    END IF;

    UPDATE tenant_counters SET
        total_customers = v_counter.total_customers + 1,
        notifications_this_month = CASE
            WHEN v_counter.month_key IS DISTINCT FROM p_month_key THEN 0
            ELSE v_counter.notifications_this_month END,
        emails_this_month = CASE
            WHEN v_counter.month_key IS DISTINCT FROM p_month_key THEN 0
            ELSE v_counter.emails_this_month END,
        month_key = p_month_key,
        updated_at = now()
    WHERE business_id = p_business_id;

    RETURN v_counter.total_customers + 1;
END;
$$;

-- Counter check-and-increment plus customer insert, as one transaction.
CREATE OR REPLACE FUNCTION enroll_customer(
    p_business_id UUID,
    p_customer JSONB,
    p_max_customers INTEGER,
    p_month_key TEXT
) RETURNS JSONB
LANGUAGE plpgsql AS $$
DECLARE
    v_total INTEGER;
    v_row customers%ROWTYPE;
BEGIN
    v_total := increment_customer_count(p_business_id, p_max_customers, p_month_key);
    IF v_total IS NULL THEN
        RETURN jsonb_build_object('status', 'limit_reached');
    END IF;

    INSERT INTO customers (
        id, business_id, name, surname, email, phone, birth_date, os_family,
        active, visits_total, cycle_visits, rewards_available, rewards_redeemed,
        wallet_pass_url
    ) VALUES (
        (p_customer->>'id')::UUID,
        p_business_id,
        p_customer->>'name',
        p_customer->>'surname',
        p_customer->>'email',
        p_customer->>'phone',
        (p_customer->>'birth_date')::DATE,
        p_customer->>'os_family',
        (p_customer->>'active')::BOOLEAN,
        (p_customer->>'visits_total')::INTEGER,
        (p_customer->>'cycle_visits')::INTEGER,
        (p_customer->>'rewards_available')::INTEGER,
        (p_customer->>'rewards_redeemed')::INTEGER,
        p_customer->>'wallet_pass_url'
    )
    RETURNING * INTO v_row;

    RETURN jsonb_build_object(
        'status', 'accepted',
        'total_customers', v_total,
        'customer', to_jsonb(v_row)
    );
END;
$$;
"""
