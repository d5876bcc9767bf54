# Fixed tag vocabularies for company profiles and the directory filters

TAG_CATALOG = {
    "industry": [
        "Food & Beverage",
        "Agriculture",
        "Apparel & Textiles",
        "Automotive",
        "Aerospace & Aviation",
        "Construction",
        "Consumer Goods",
        "Cosmetics & Personal Care",
        "Electronics & Hardware",
        "Energy & Utilities",
        "Environmental Services",
        "Finance & Accounting",
        "Healthcare & Medical Devices",
        "Home Goods & Furniture",
        "Industrial Equipment",
        "Information Technology",
        "Legal & Compliance",
        "Logistics & Distribution",
        "Machining & Metalworking",
        "Media & Publishing",
        "Mining & Natural Resources",
        "Non-Profit / Community Services",
        "Packaging & Printing",
        "Paper & Pulp",
        "Pharmaceuticals",
        "Professional Services",
        "Renewable Energy",
        "Retail",
        "Software & SaaS",
        "Telecommunications",
        "Transportation",
        "Waste Management",
        "Wood & Forestry",
    ],
    "capability": [
        "Assembly & Kitting",
        "3D Printing",
        "CAD Design",
        "Cold Storage",
        "Co-Packing",
        "Custom Fabrication",
        "Die Cutting",
        "Digital Printing",
        "Drop Shipping",
        "E-commerce Fulfillment",
        "Electrical Assembly",
        "Food Packaging",
        "Formulating / Mixing",
        "Injection Molding",
        "Label Printing",
        "Last-Mile Delivery",
        "Legal Advisory",
        "Logistics Coordination",
        "Machining (CNC, Laser, Plasma)",
        "Metal Bending / Forming",
        "Milling",
        "Packaging Design",
        "Palletizing",
        "Plastics Manufacturing",
        "Powder Coating",
        "Product Photography",
        "Product Sourcing",
        "Quality Control & Testing",
        "Regulatory Compliance Consulting",
        "Retail Distribution",
        "Screen Printing",
        "Sheet Metal Fabrication",
        "Shrink Wrapping",
        "Software Development",
        "Sustainability Consulting",
        "Tooling & Prototyping",
        "Warehousing",
        "Welding",
        "Wholesale Distribution",
        "Woodworking",
        "Workforce Training",
    ],
    "region": [
        "Alberta",
        "British Columbia",
        "Manitoba",
        "New Brunswick",
        "Newfoundland and Labrador",
        "Northwest Territories",
        "Nova Scotia",
        "Nunavut",
        "Ontario",
        "Prince Edward Island",
        "Quebec",
        "Saskatchewan",
        "Yukon",
        "Calgary",
        "Edmonton",
        "Vancouver",
        "Victoria",
        "Winnipeg",
        "Fredericton",
        "St. John's",
        "Yellowknife",
        "Halifax",
        "Iqaluit",
        "Toronto",
        "Ottawa",
        "Hamilton",
        "Kitchener-Waterloo",
        "London (ON)",
        "Montreal",
        "Quebec City",
        "Saskatoon",
        "Regina",
        "Charlottetown",
        "Whitehorse",
    ],
}

TAG_CATEGORIES = tuple(TAG_CATALOG)
