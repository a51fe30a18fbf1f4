"""Default subcategory mapping catalog.

Each entry links a subcategory identifier to exact keywords (matched
case-insensitively on word boundaries) and regex patterns (matched
case-insensitively as written). ``weight`` multiplies the entry's score,
so housing and cash entries outrank generic retail ones on equal evidence.

The catalog is plain data; :mod:`src.utils.config` turns it into
validated :class:`~src.utils.config.SubcategoryMapping` models.
"""

DEFAULT_SUBCATEGORY_MAPPINGS: list[dict] = [
    # Banking / cash operations
    {
        "subcategory": "cash_withdrawal",
        "keywords": ["atm", "withdrawal", "cash out", "cash withdrawal"],
        "patterns": [
            r"\batm\s*withdraw(?:al)?\b",
            r"\bcash\s*(?:out|back|withdrawal)\b",
            r"\bwithdraw(?:al)?\s*(?:from)?\s*(?:atm|machine)\b",
        ],
        "weight": 1.2,
    },
    {
        "subcategory": "pos_purchase",
        "keywords": ["pos", "point of sale", "purchase", "debit card"],
        "patterns": [
            r"\bpos\s*(?:purchase|transaction)?\b",
            r"\bpoint\s*of\s*sale\b",
            r"\bdebit\s*(?:card)?\s*purchase\b",
        ],
        "weight": 1.0,
    },
    {
        "subcategory": "direct_deposit",
        "keywords": ["direct deposit", "payroll", "salary", "paycheck"],
        "patterns": [
            r"\bdirect\s*deposit\b",
            r"\bpayroll\s*(?:deposit)?\b",
            r"\bsalary\s*(?:deposit|payment)?\b",
        ],
        "weight": 1.1,
    },
    {
        "subcategory": "wire_transfer",
        "keywords": ["wire", "wire transfer", "swift", "international transfer"],
        "patterns": [
            r"\bwire\s*transfer\b",
            r"\bswift\s*(?:transfer|payment)?\b",
            r"\binternational\s*transfer\b",
        ],
        "weight": 1.0,
    },
    # Shopping / retail
    {
        "subcategory": "grocery",
        "keywords": ["grocery", "supermarket", "food", "produce", "groceries"],
        "patterns": [
            r"\b(whole\s?foods|trader\s?joe'?s?|safeway|kroger|publix|wegmans"
            r"|aldi|costco|walmart\s*(?:grocery)?|target\s*(?:grocery)?)\b",
            r"\bgrocery\s*(?:store)?\b",
            r"\bsupermarket\b",
        ],
        "weight": 1.0,
    },
    {
        "subcategory": "fuel",
        "keywords": ["fuel", "gas", "gasoline", "petrol", "diesel", "gas station"],
        "patterns": [
            r"\b(shell|exxon|mobil|chevron|bp|76|texaco|citgo|speedway|valero"
            r"|sunoco|marathon)\b",
            r"\bfuel\s*(?:purchase|station)?\b",
            r"\bgas\s*(?:station|pump)?\b",
            r"\bgasoline\b",
        ],
        "weight": 1.0,
    },
    {
        "subcategory": "restaurant",
        "keywords": ["restaurant", "dining", "food service", "eatery", "cafe"],
        "patterns": [
            r"\b(mcdonald'?s?|burger\s*king|wendy'?s?|starbucks|dunkin|chipotle"
            r"|subway|domino'?s?|pizza\s*hut|taco\s*bell)\b",
            r"\brestaurant\b",
            r"\bdining\b",
            r"\bcafe\b",
        ],
        "weight": 1.0,
    },
    # Bills / utilities
    {
        "subcategory": "utility_bill",
        "keywords": ["utility", "electric", "electricity", "water", "gas bill", "power"],
        "patterns": [
            r"\b(utility|utilities)\s*(?:bill|payment)?\b",
            r"\belectric(?:ity)?\s*(?:bill|payment)?\b",
            r"\bwater\s*(?:bill|service)?\b",
            r"\bpower\s*(?:bill|company)?\b",
        ],
        "weight": 1.0,
    },
    {
        "subcategory": "internet_cable",
        "keywords": ["internet", "cable", "broadband", "wifi", "streaming"],
        "patterns": [
            r"\b(comcast|xfinity|spectrum|at&t|verizon|cox|frontier|centurylink)"
            r"\s*(?:internet|cable)?\b",
            r"\binternet\s*(?:service|bill)?\b",
            r"\bcable\s*(?:tv|service)?\b",
        ],
        "weight": 1.0,
    },
    {
        "subcategory": "phone_bill",
        "keywords": ["phone", "mobile", "cellular", "wireless"],
        "patterns": [
            r"\b(verizon|at&t|t-mobile|sprint|cricket|boost|metro\s*pcs)"
            r"\s*(?:wireless|mobile)?\b",
            r"\bphone\s*(?:bill|service)?\b",
            r"\bmobile\s*(?:bill|service)?\b",
            r"\bcellular\b",
        ],
        "weight": 1.0,
    },
    # Housing
    {
        "subcategory": "rent",
        "keywords": ["rent", "rental", "lease payment", "monthly rent"],
        "patterns": [
            r"\brent(?:al)?\s*(?:payment)?\b",
            r"\blease\s*(?:payment)?\b",
            r"\bmonthly\s*rent\b",
        ],
        "weight": 1.2,
    },
    {
        "subcategory": "mortgage",
        "keywords": ["mortgage", "home loan", "housing payment"],
        "patterns": [
            r"\bmortgage\s*(?:payment)?\b",
            r"\bhome\s*loan\b",
            r"\bhousing\s*(?:payment|loan)?\b",
        ],
        "weight": 1.2,
    },
    # Healthcare
    {
        "subcategory": "medical",
        "keywords": ["medical", "healthcare", "doctor", "physician", "hospital", "clinic"],
        "patterns": [
            r"\bmedical\s*(?:bill|expense|payment)?\b",
            r"\bhealthcare\s*(?:expense|payment)?\b",
            r"\b(hospital|clinic|doctor|physician)\s*(?:bill|visit)?\b",
        ],
        "weight": 1.0,
    },
    {
        "subcategory": "pharmacy",
        "keywords": ["pharmacy", "prescription", "medication", "drug store"],
        "patterns": [
            r"\b(cvs|walgreens|rite\s*aid|walmart\s*pharmacy)\b",
            r"\bpharmacy\b",
            r"\bprescription\b",
            r"\bmedication\b",
        ],
        "weight": 1.0,
    },
    # Insurance
    {
        "subcategory": "auto_insurance",
        "keywords": ["auto insurance", "car insurance", "vehicle insurance"],
        "patterns": [
            r"\b(geico|progressive|state\s*farm|allstate|liberty\s*mutual|farmers)"
            r"\s*(?:auto|car)?\b",
            r"\bauto\s*insurance\b",
            r"\bcar\s*insurance\b",
            r"\bvehicle\s*insurance\b",
        ],
        "weight": 1.1,
    },
    {
        "subcategory": "health_insurance",
        "keywords": ["health insurance", "medical insurance", "healthcare plan"],
        "patterns": [
            r"\b(blue\s*cross|aetna|cigna|united\s*health|humana|kaiser)\b",
            r"\bhealth\s*insurance\b",
            r"\bmedical\s*insurance\b",
        ],
        "weight": 1.1,
    },
    # Subscriptions / memberships
    {
        "subcategory": "subscription",
        "keywords": ["subscription", "membership", "recurring"],
        "patterns": [
            r"\b(netflix|spotify|amazon\s*prime|hulu|disney\+?|hbo|apple\s*(?:music|tv))\b",
            r"\bsubscription\b",
            r"\bmembership\s*(?:fee)?\b",
            r"\brecurring\s*(?:charge|payment)?\b",
        ],
        "weight": 1.0,
    },
    {
        "subcategory": "gym_fitness",
        "keywords": ["gym", "fitness", "workout", "exercise"],
        "patterns": [
            r"\b(planet\s*fitness|la\s*fitness|anytime\s*fitness|24\s*hour\s*fitness"
            r"|equinox|gold'?s?\s*gym)\b",
            r"\bgym\s*(?:membership)?\b",
            r"\bfitness\s*(?:center|club)?\b",
        ],
        "weight": 1.0,
    },
    # Charitable
    {
        "subcategory": "donation",
        "keywords": ["donation", "charity", "charitable", "nonprofit", "contribution"],
        "patterns": [
            r"\bdonation\b",
            r"\bcharit(?:y|able)\s*(?:contribution)?\b",
            r"\bnonprofit\b",
            r"\bcontribution\b",
        ],
        "weight": 1.0,
    },
    # Travel / transportation
    {
        "subcategory": "travel",
        "keywords": ["travel", "flight", "hotel", "airline", "booking"],
        "patterns": [
            r"\b(united|delta|american|southwest|jetblue|spirit)\s*(?:airlines?)?\b",
            r"\b(marriott|hilton|hyatt|ihg|wyndham|airbnb)\b",
            r"\bflight\s*(?:booking)?\b",
            r"\bhotel\s*(?:booking|reservation)?\b",
        ],
        "weight": 1.0,
    },
    {
        "subcategory": "transportation",
        "keywords": ["uber", "lyft", "taxi", "rideshare", "public transit"],
        "patterns": [
            r"\b(uber|lyft|taxi|cab)\b",
            r"\brideshare\b",
            r"\bpublic\s*(?:transit|transportation)?\b",
            r"\b(metro|subway|bus)\s*(?:fare)?\b",
        ],
        "weight": 1.0,
    },
]
